"""Storage backends for summary tables and entity models."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
import functools
import logging
from os import PathLike
from pathlib import Path
import typing

import h5py
import numpy as np
import numpy.typing as npt
import orjson
from typing_extensions import ParamSpec, Self
import yaml

from ressum.errors import StorageError, ValidationError
from ressum.serialization import Serializable, SerializableT


__all__ = [
    "DataStore",
    "new_store",
    "storage_backend",
    "HDF5Store",
    "JSONStore",
    "YAMLStore",
    "StoreSerializable",
]

logger = logging.getLogger(__name__)


class DataStore(typing.Generic[SerializableT], ABC):
    """Abstract base class for data storage classes."""

    @abstractmethod
    def load(
        self, typ: typing.Type[SerializableT], *args, **kwargs
    ) -> typing.Iterable[SerializableT]: ...

    @abstractmethod
    def dump(self, data: typing.Iterable[SerializableT], *args, **kwargs) -> None: ...


StoreT = typing.TypeVar("StoreT", bound=DataStore)

_STORAGE_BACKENDS: typing.Dict[str, typing.Type[DataStore]] = {}


def storage_backend(
    *names: str,
) -> typing.Callable[[typing.Type[StoreT]], typing.Type[StoreT]]:
    """
    Data store registration decorator.

    :param names: Names (usually file extensions) the store is registered under
    :return: Class decorator
    """

    def _decorator(store_cls: typing.Type[StoreT]) -> typing.Type[StoreT]:
        for name in names:
            _STORAGE_BACKENDS[name] = store_cls
        return store_cls

    return _decorator


def _validate_filepath(
    filepath: typing.Union[PathLike, str],
    expected_extensions: typing.Sequence[str] = (),
    create_parent: bool = False,
) -> Path:
    """
    Validate and normalize a filepath for storage.

    :param filepath: Path to validate
    :param expected_extensions: Accepted file extensions. The first one is
        appended when the path has no extension.
    :param create_parent: If True, creates the parent directory if it does not exist
    :return: Validated Path object
    :raises StorageError: If filepath is invalid or has wrong extension
    """
    path = Path(filepath)

    if not str(path).strip():
        raise StorageError("Filepath cannot be empty")
    if "\x00" in str(path):
        raise StorageError("Filepath contains null characters")

    if expected_extensions:
        if not path.suffix:
            path = path.with_suffix(expected_extensions[0])
            logger.debug(f"Added extension: {path}")
        elif path.suffix.lower() not in expected_extensions:
            raise StorageError(
                f"Expected one of the file extensions {list(expected_extensions)}, "
                f"got '{path.suffix}'. Use '{path.with_suffix(expected_extensions[0])}' instead."
            )

    if create_parent and not path.parent.exists():
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created parent directory: {path.parent}")
        except Exception as exc:
            raise StorageError(
                f"Failed to create parent directory '{path.parent}': {exc}"
            ) from exc
    return path


P = ParamSpec("P")
R = typing.TypeVar("R")


def _raise_storage_error(func: typing.Callable[P, R]) -> typing.Callable[P, R]:
    """
    Wraps a function to raise StorageError on exceptions.

    :param func: Function to wrap
    """

    @functools.wraps(func)
    def _wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(exc) from exc

    return _wrapper


def _to_builtin(value: typing.Any) -> typing.Any:
    """Convert tuples and NumPy values into plain lists and scalars."""
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Mapping):
        return {k: _to_builtin(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [_to_builtin(v) for v in value]
    return value


def _sequence_to_ndarray(value: Sequence, path: str) -> npt.NDArray:
    """
    Convert a flat sequence into a NumPy array that is safe for HDF5 storage.
    """
    if not value:
        return np.empty((0,), dtype=np.int8)

    if all(isinstance(v, str) for v in value):
        return np.asarray(value, dtype=h5py.string_dtype(encoding="utf-8"))

    if all(
        isinstance(v, (int, float, np.integer, np.floating))
        and not isinstance(v, (bool, np.bool_))
        for v in value
    ):
        return np.asarray(value)

    raise TypeError(
        f"Unsupported or mixed sequence contents at {path}: "
        f"{set(type(v).__name__ for v in value)}"
    )


def _normalize_loaded_value(value: typing.Any) -> typing.Any:
    """Normalize values loaded from HDF5 datasets."""
    if isinstance(value, np.ndarray) and value.dtype.kind in ("U", "S", "O"):
        return [
            v.decode("utf-8") if isinstance(v, bytes) else str(v)
            for v in value.tolist()
        ]
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


# HDF5 reads "/" in a name as a path separator, so names are escaped
_NAME_ESCAPES = (("%", "%25"), ("/", "%2F"))


def _escape_name(name: str) -> str:
    for char, escape in _NAME_ESCAPES:
        name = name.replace(char, escape)
    return name


def _unescape_name(name: str) -> str:
    for char, escape in reversed(_NAME_ESCAPES):
        name = name.replace(escape, char)
    return name


@storage_backend("hdf5", "h5")
class HDF5Store(DataStore[SerializableT]):
    """
    HDF5-based storage.

    Mappings become groups, sequences become compressed datasets and scalars
    become attributes. Each dumped item gets its own top-level group.
    """

    def __init__(
        self,
        filepath: typing.Union[PathLike, str],
        compression: typing.Literal["gzip", "lzf"] = "gzip",
        compression_opts: typing.Optional[int] = 3,
    ):
        """
        Initialize the store

        :param filepath: Path to the HDF5 file
        :param compression: Compression algorithm - 'gzip' or 'lzf'
        :param compression_opts: Compression level (1-9 for gzip)
        :raises StorageError: If filepath is invalid or has wrong extension
        """
        self.filepath = _validate_filepath(
            filepath, expected_extensions=(".h5", ".hdf5"), create_parent=True
        )
        self.compression = compression
        self.compression_opts = compression_opts if compression == "gzip" else None

    def _create_dataset(self, group: h5py.Group, name: str, data: np.ndarray):
        if data.size == 0:
            return group.create_dataset(name=name, data=data)
        return group.create_dataset(
            name=name,
            data=data,
            compression=self.compression,
            compression_opts=self.compression_opts,
            chunks=True,
        )

    def _write_data(self, group: h5py.Group, data: Mapping[str, typing.Any]) -> None:
        """
        Write data to an HDF5 group.

        Rules:
        - Mappings to subgroups (recursive)
        - Sequences/arrays to datasets (never attributes)
        - Scalars to attributes
        """
        for key, value in data.items():
            name = _escape_name(str(key))
            if isinstance(value, Mapping):
                self._write_data(group=group.create_group(name), data=value)
            elif isinstance(value, np.ndarray):
                if value.dtype == object:
                    raise TypeError(
                        f"HDF5 cannot store object-dtype arrays: {group.name}/{name}"
                    )
                self._create_dataset(group=group, name=name, data=value)
            elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
                array = _sequence_to_ndarray(value=value, path=f"{group.name}/{name}")
                self._create_dataset(group=group, name=name, data=array)
            elif isinstance(value, np.generic):
                group.attrs[name] = value.item()
            else:
                group.attrs[name] = value

    @_raise_storage_error
    def dump(  # type: ignore[override]
        self,
        data: typing.Iterable[SerializableT],
        exist_ok: bool = True,
        **kwargs: typing.Any,
    ) -> None:
        """
        Dump data to the HDF5 file.

        :param data: Iterable of serializable instances to dump
        :param exist_ok: If True, overwrites an existing file, else fails if it exists
        :raises StorageError: If unable to write to file
        """
        mode = "w" if exist_ok else "w-"

        with h5py.File(name=str(self.filepath), mode=mode) as f:
            count = 0
            for item in data:
                group_name = f"item_{count:06d}"
                self._write_data(group=f.create_group(group_name), data=item.dump())
                logger.debug(f"Wrote item {count} to group '{group_name}' in store")
                count += 1

            f.attrs["count"] = count
            logger.debug(f"Completed dump of {count} items to {self.filepath}")

    def _load_data(self, group: h5py.Group) -> typing.Dict[str, typing.Any]:
        data: typing.Dict[str, typing.Any] = {}

        for name in group.keys():
            item = group[name]
            if isinstance(item, h5py.Dataset):
                data[_unescape_name(name)] = _normalize_loaded_value(item[()])
            elif isinstance(item, h5py.Group):
                data[_unescape_name(name)] = self._load_data(group=item)

        for name in group.attrs.keys():
            data[_unescape_name(name)] = _normalize_loaded_value(group.attrs[name])
        return data

    @_raise_storage_error
    def load(  # type: ignore[override]
        self, typ: typing.Type[SerializableT], **kwargs: typing.Any
    ) -> typing.List[SerializableT]:
        """
        Load data instances from the HDF5 file.

        :param typ: Type of the serializable objects to load
        :return: List of loaded instances of the specified type
        """
        items = []
        with h5py.File(name=str(self.filepath), mode="r") as f:
            for key in sorted(f.keys()):
                logger.debug(f"Loading item from group '{key}'")
                items.append(
                    typ.load(self._load_data(group=typing.cast(h5py.Group, f[key])))
                )
        return items

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(filepath={self.filepath}, "
            f"compression={self.compression}, compression_opts={self.compression_opts})"
        )


@storage_backend("json")
class JSONStore(DataStore[SerializableT]):
    """JSON-based storage, written with orjson."""

    def __init__(self, filepath: typing.Union[PathLike, str]):
        """
        Initialize the store

        :param filepath: Path to the JSON file
        :raises StorageError: If filepath is invalid or has wrong extension
        """
        self.filepath = _validate_filepath(
            filepath, expected_extensions=(".json",), create_parent=True
        )

    @_raise_storage_error
    def dump(  # type: ignore[override]
        self,
        data: typing.Iterable[SerializableT],
        exist_ok: bool = True,
        **kwargs: typing.Any,
    ) -> None:
        """
        Dump items as a JSON array.

        :param data: Iterable of serializable instances to dump
        :param exist_ok: If True, will overwrite existing files
        """
        if not exist_ok and self.filepath.exists():
            raise StorageError(f"File '{self.filepath}' already exists")

        data_list = [_to_builtin(item.dump()) for item in data]
        with open(self.filepath, "wb") as f:
            f.write(orjson.dumps(data_list, option=orjson.OPT_INDENT_2))
        logger.debug(f"Completed dump of {len(data_list)} items to {self.filepath}")

    @_raise_storage_error
    def load(  # type: ignore[override]
        self, typ: typing.Type[SerializableT], **kwargs: typing.Any
    ) -> typing.List[SerializableT]:
        """
        Load items from the JSON file.

        :param typ: Type of the serializable objects to load
        :return: List of loaded instances of the specified type
        """
        with open(self.filepath, "rb") as f:
            data = orjson.loads(f.read())

        if isinstance(data, Mapping):
            data = [data]
        return [typ.load(item) for item in data]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(filepath={self.filepath})"


@storage_backend("yaml", "yml")
class YAMLStore(DataStore[SerializableT]):
    """
    YAML-based storage.

    Human-readable, good for entity models and small summaries.
    """

    def __init__(self, filepath: typing.Union[PathLike, str]):
        """
        Initialize the store

        :param filepath: Path to the YAML file
        :raises StorageError: If filepath is invalid or has wrong extension
        """
        self.filepath = _validate_filepath(
            filepath, expected_extensions=(".yaml", ".yml"), create_parent=True
        )

    @_raise_storage_error
    def dump(  # type: ignore[override]
        self,
        data: typing.Iterable[SerializableT],
        exist_ok: bool = True,
        **kwargs: typing.Any,
    ) -> None:
        """
        Dump items as a YAML sequence.

        :param data: Iterable of serializable instances to dump
        :param exist_ok: If True, will overwrite existing files
        """
        if not exist_ok and self.filepath.exists():
            raise StorageError(f"File '{self.filepath}' already exists")

        data_list = [_to_builtin(item.dump()) for item in data]
        with open(self.filepath, "w", encoding="utf-8") as f:
            yaml.safe_dump(data_list, f, sort_keys=False)

    @_raise_storage_error
    def load(  # type: ignore[override]
        self, typ: typing.Type[SerializableT], **kwargs: typing.Any
    ) -> typing.List[SerializableT]:
        """
        Load items from the YAML file.

        A document holding a single mapping is loaded as one item.

        :param typ: Type of the serializable objects to load
        :return: List of loaded instances of the specified type
        """
        with open(self.filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            return []
        if isinstance(data, Mapping):
            data = [data]
        return [typ.load(item) for item in data]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(filepath={self.filepath})"

def new_store(
    backend: typing.Union[str, typing.Literal["hdf5", "h5", "json", "yaml", "yml"]],
    *args: typing.Any,
    **kwargs: typing.Any,
) -> DataStore:
    """
    Create a new data store.

    :param backend: Storage backend to use ('hdf5', 'json', 'yaml', ...)
    :param args: Additional positional arguments for the store constructor
    :param kwargs: Additional keyword arguments for the store constructor
    :return: An instance of the selected `DataStore` backend

    Example:
    ```python
    store = new_store("hdf5", "case.h5")
    engine = SummaryEngine(model, store=store)
    ```
    """
    if backend not in _STORAGE_BACKENDS:
        raise ValidationError(
            f"Unknown backend: {backend}. Choose from {list(_STORAGE_BACKENDS.keys())}"
        )
    return _STORAGE_BACKENDS[backend](*args, **kwargs)


class StoreSerializable(Serializable):
    """Serializable mixin with built-in store/file support."""

    @classmethod
    def from_store(
        cls, store: DataStore[Self], **load_kwargs: typing.Any
    ) -> typing.Optional[Self]:
        """
        Load the first instance held by a `DataStore`.

        :param store: `DataStore` to load from.
        :return: Loaded instance, or None if the store is empty.
        """
        return next(iter(store.load(cls, **load_kwargs)), None)

    def to_store(self, store: DataStore[Self], **dump_kwargs: typing.Any) -> None:
        """
        Dump the instance to a `DataStore`.

        :param store: `DataStore` to dump to.
        """
        store.dump([self], **dump_kwargs)

    @classmethod
    def from_file(
        cls, filepath: typing.Union[str, PathLike], **load_kwargs: typing.Any
    ) -> typing.Optional[Self]:
        """
        Load an instance from a file. The backend is picked from the extension.

        :param filepath: Path to the file to load from.
        :return: Loaded instance, or None if the file holds none.
        """
        path = Path(filepath)
        return cls.from_store(new_store(path.suffix.lower().lstrip("."), path), **load_kwargs)

    def to_file(
        self, filepath: typing.Union[str, PathLike], **dump_kwargs: typing.Any
    ) -> None:
        """
        Dump the instance to a file. The backend is picked from the extension.

        :param filepath: Path to the file to dump to.
        """
        path = Path(filepath)
        self.to_store(new_store(path.suffix.lower().lstrip("."), path), **dump_kwargs)
