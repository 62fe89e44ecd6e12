import typing

import attrs
import cattrs
from typing_extensions import Self

from ressum.errors import DeserializationError, SerializationError


__all__ = ["Serializable", "SerializableT", "converter"]


converter = cattrs.Converter()


def fallback_unstructure(value):
    return value


def fallback_structure(value, typ):
    return value


def _is_generic_alias(typ: typing.Any) -> bool:
    """Check if a type is a generic alias (e.g., List[int], Dict[str, float])"""
    return hasattr(typ, "__origin__") and typ.__origin__ is not None


# Field values pass through untouched. Classes normalize them with attrs converters.
converter.register_unstructure_hook_func(
    check_func=lambda t: _is_generic_alias(t) or not attrs.has(t),
    func=fallback_unstructure,
)
converter.register_structure_hook_func(
    check_func=lambda t: _is_generic_alias(t) or not attrs.has(t),
    func=fallback_structure,
)


class Serializable:
    """
    Mixin for attrs classes that can be dumped to and loaded from plain mappings.
    """

    def dump(self) -> typing.Dict[str, typing.Any]:
        """Dump the object to a dictionary."""
        try:
            return converter.unstructure(self)
        except Exception as exc:
            raise SerializationError(
                f"Failed to dump {type(self).__name__!r} object"
            ) from exc

    @classmethod
    def load(cls, data: typing.Mapping[str, typing.Any]) -> Self:
        """Load an object from a mapping."""
        try:
            return converter.structure(dict(data), cls)
        except Exception as exc:
            raise DeserializationError(
                f"Failed to load serializable object of type {cls.__name__!r}"
            ) from exc


SerializableT = typing.TypeVar("SerializableT", bound=Serializable)
