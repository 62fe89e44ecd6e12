"""Conversion factors and naming constants"""

from contextvars import ContextVar
import typing

import attrs


__all__ = ["Constant", "Constants", "c", "ConstantsContext"]


@attrs.frozen(slots=True)
class Constant:
    """
    A constant value with optional description and unit.
    """

    value: typing.Any
    """The actual value of the constant."""

    description: typing.Optional[str] = None
    """Optional description of what this constant represents."""

    unit: typing.Optional[str] = None
    """Optional unit of measurement for this constant."""

    def __str__(self) -> str:
        return f"{self.value}{self.unit or ''}"


DEFAULT_CONSTANTS: typing.Dict[str, typing.Union[typing.Any, Constant]] = {
    # Time Conversions
    "SECONDS_PER_DAY": Constant(
        value=86400.0, description="Number of seconds in a day", unit="s/day"
    ),
    # Pressure Conversions
    "BARS_PER_PASCAL": Constant(
        value=1 / 100_000.0, description="Number of bars in a pascal", unit="bar/Pa"
    ),
    # Naming
    "FIELD_NAME": Constant(
        value="FIELD",
        description="Entity name under which field level keywords are reported",
    ),
    "KEY_SEPARATOR": Constant(
        value=":",
        description="Separator between keyword and entity name in summary vector keys",
    ),
}


class Constants:
    """
    Conversion factors and naming constants used when writing summaries.

    Use attribute access for values and item access for `Constant` objects.
    """

    __slots__ = ("_store",)

    def __init__(self, **overrides: typing.Any) -> None:
        store: typing.Dict[str, Constant] = {}
        for name, value in {**DEFAULT_CONSTANTS, **overrides}.items():
            store[name] = value if isinstance(value, Constant) else Constant(value)
        object.__setattr__(self, "_store", store)

    def __getattr__(self, name: str) -> typing.Any:
        if name.startswith("_"):
            return object.__getattribute__(self, name)
        try:
            return self._store[name].value
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            ) from None

    def __setattr__(self, name: str, value: typing.Any) -> None:
        self._store[name] = value if isinstance(value, Constant) else Constant(value)

    def __getitem__(self, name: str) -> Constant:
        return self._store[name]

    def __contains__(self, name: str) -> bool:
        return name in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(constants={len(self._store)})"

    def __call__(self) -> "ConstantsContext":
        """
        Create a context manager that temporarily makes this instance the one
        seen through the global proxy `ressum.c`.
        """
        return ConstantsContext(self)


_constants_context: ContextVar[Constants] = ContextVar(
    "constants_context", default=Constants()
)


class ConstantsContext:
    """Context manager for temporary global `Constants` overrides."""

    def __init__(self, constants: Constants) -> None:
        self._new_constants = constants
        self._token = None

    def __enter__(self) -> Constants:
        self._token = _constants_context.set(self._new_constants)
        return self._new_constants

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._token is not None:
            _constants_context.reset(self._token)


class _ConstantsProxy:
    """Proxy to the `Constants` instance of the current context."""

    @property
    def _constants(self) -> Constants:
        return _constants_context.get()

    def __getattr__(self, name: str) -> typing.Any:
        return getattr(self._constants, name)

    def __getitem__(self, name: str) -> Constant:
        return self._constants[name]


c = _ConstantsProxy()
"""Global proxy to access conversion factors and naming constants."""
