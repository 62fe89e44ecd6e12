"""Static description of the entities and keywords a summary reports on."""

import logging
import types
import typing

import attrs

from ressum.errors import ValidationError
from ressum.keywords import SummaryKeyword, parse_keyword
from ressum.stores import StoreSerializable
from ressum.types import EntityKind

logger = logging.getLogger(__name__)

__all__ = ["EntityModel"]


def _str_tuple(value: typing.Optional[typing.Iterable[typing.Any]]) -> typing.Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _keyword_tuple(value: typing.Optional[typing.Iterable[typing.Any]]) -> typing.Tuple[str, ...]:
    keywords = []
    for name in _str_tuple(value):
        name = name.upper()
        if name not in keywords:
            keywords.append(name)
    return tuple(keywords)


def _frozen_mapping(
    value: typing.Optional[typing.Mapping[str, typing.Any]],
) -> typing.Mapping[str, typing.Tuple[str, ...]]:
    return types.MappingProxyType(
        {str(k): _str_tuple(v) for k, v in (value or {}).items()}
    )


def _frozen_selections(
    value: typing.Optional[typing.Mapping[str, typing.Any]],
) -> typing.Mapping[str, typing.Tuple[str, ...]]:
    return types.MappingProxyType(
        {str(k).upper(): _str_tuple(v) for k, v in (value or {}).items()}
    )


def _validate_keywords(instance, attribute, value: typing.Tuple[str, ...]) -> None:
    for name in value:
        parse_keyword(name)


@attrs.frozen
class EntityModel(StoreSerializable):
    """
    Wells, group membership and requested summary keywords.

    The model is immutable. A `SummaryEngine` reads it once when constructed,
    so the membership it aggregates with cannot change during a run.
    """

    keywords: typing.Tuple[str, ...] = attrs.field(
        default=(), converter=_keyword_tuple, validator=_validate_keywords
    )
    """Requested summary keywords, e.g. ``("WOPR", "GWCT", "FOPT")``."""
    groups: typing.Mapping[str, typing.Tuple[str, ...]] = attrs.field(
        factory=dict, converter=_frozen_mapping
    )
    """Member well names of each group."""
    wells: typing.Tuple[str, ...] = attrs.field(default=(), converter=_str_tuple)
    """Declared wells. Group members are implicitly declared."""
    selections: typing.Mapping[str, typing.Tuple[str, ...]] = attrs.field(
        factory=dict, converter=_frozen_selections
    )
    """
    Optional restriction of a keyword to named entities.

    Keywords without a selection are reported for every entity of their level.
    """

    def __attrs_post_init__(self) -> None:
        for keyword, names in self.selections.items():
            if keyword not in self.keywords:
                raise ValidationError(
                    f"Selection given for keyword {keyword!r} which is not requested"
                )
            if parse_keyword(keyword).kind is EntityKind.FIELD:
                raise ValidationError(
                    f"Field keyword {keyword!r} cannot be restricted to entities"
                )
            if not names:
                raise ValidationError(f"Selection for keyword {keyword!r} is empty")

    @property
    def well_names(self) -> typing.Tuple[str, ...]:
        """Declared wells followed by group members not declared explicitly."""
        names = list(self.wells)
        for members in self.groups.values():
            for well in members:
                if well not in names:
                    names.append(well)
        return tuple(names)

    @property
    def group_names(self) -> typing.Tuple[str, ...]:
        return tuple(self.groups)

    def is_known_well(self, name: str) -> bool:
        return name in self.well_names

    def members(self, group: str) -> typing.Tuple[str, ...]:
        """
        Member wells of a group.

        :raises ValidationError: If the group is unknown.
        """
        try:
            return self.groups[group]
        except KeyError:
            raise ValidationError(f"Unknown group {group!r}") from None

    def groups_of(self, well: str) -> typing.Tuple[str, ...]:
        """Names of the groups a well belongs to."""
        return tuple(group for group, members in self.groups.items() if well in members)

    def requested(
        self, kind: typing.Optional[EntityKind] = None
    ) -> typing.Tuple[SummaryKeyword, ...]:
        """
        Parsed requested keywords, optionally of one entity level only.
        """
        keywords = (parse_keyword(name) for name in self.keywords)
        if kind is None:
            return tuple(keywords)
        return tuple(keyword for keyword in keywords if keyword.kind is kind)

    def selection(self, keyword: str) -> typing.Optional[typing.Tuple[str, ...]]:
        """Entities a keyword is restricted to, or None when unrestricted."""
        return self.selections.get(keyword.upper())
