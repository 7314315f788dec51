"""Data models for the catalog engine and the views handed to the renderer."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple

from constants import MAX_STAT_VALUE
from errors import DecodeError


def _require(mapping: Any, key: str, kind: type, where: str) -> Any:
    """Fetch ``mapping[key]`` and check its type, raising DecodeError otherwise."""
    if not isinstance(mapping, dict):
        raise DecodeError(f"{where}: expected an object, got {type(mapping).__name__}")
    if key not in mapping:
        raise DecodeError(f"{where}: missing '{key}'")
    value = mapping[key]
    # bool is an int subclass but never a valid id or stat
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(f"{where}: '{key}' should be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class CollectionSummary:
    """One entry of a paginated list response."""
    name: str
    detail_url: str

    @classmethod
    def from_api(cls, payload: Any) -> "CollectionSummary":
        return cls(
            name=_require(payload, "name", str, "list entry"),
            detail_url=_require(payload, "url", str, "list entry"),
        )


@dataclass(frozen=True)
class TypeSlot:
    category: str


@dataclass(frozen=True)
class StatEntry:
    stat_name: str
    base_value: int

    @property
    def fraction(self) -> float:
        """Share of the maximum base stat, used for the stat bars."""
        return self.base_value / MAX_STAT_VALUE


@dataclass(frozen=True)
class AbilitySlot:
    ability_name: str


@dataclass(frozen=True)
class DetailRecord:
    """Fully resolved Pokemon. Identity is ``id``."""
    id: int
    name: str
    sprite_url: Optional[str]
    types: Tuple[TypeSlot, ...] = ()
    stats: Tuple[StatEntry, ...] = ()
    abilities: Tuple[AbilitySlot, ...] = ()

    @property
    def category_names(self) -> Tuple[str, ...]:
        return tuple(t.category for t in self.types)

    @classmethod
    def from_api(cls, payload: Any) -> "DetailRecord":
        """Build a record from a PokéAPI ``/pokemon/{id}`` response.

        Only the fields the viewer displays are read. Anything missing or of
        the wrong type raises DecodeError.
        """
        record_id = _require(payload, "id", int, "pokemon")
        name = _require(payload, "name", str, "pokemon")
        where = f"pokemon {record_id}"

        sprites = payload.get("sprites") or {}
        if not isinstance(sprites, dict):
            raise DecodeError(f"{where}: 'sprites' should be an object")
        sprite_url = sprites.get("front_default")
        if sprite_url is not None and not isinstance(sprite_url, str):
            raise DecodeError(f"{where}: 'sprites.front_default' should be a string")

        types = tuple(
            TypeSlot(category=_require(_require(slot, "type", dict, where), "name", str, where))
            for slot in _require(payload, "types", list, where)
        )

        stats = []
        for slot in _require(payload, "stats", list, where):
            stat_name = _require(_require(slot, "stat", dict, where), "name", str, where)
            base_value = _require(slot, "base_stat", int, where)
            if not 0 <= base_value <= MAX_STAT_VALUE:
                raise DecodeError(f"{where}: base stat {stat_name}={base_value} out of range")
            stats.append(StatEntry(stat_name=stat_name, base_value=base_value))

        abilities = tuple(
            AbilitySlot(ability_name=_require(_require(slot, "ability", dict, where), "name", str, where))
            for slot in _require(payload, "abilities", list, where)
        )

        return cls(
            id=record_id,
            name=name,
            sprite_url=sprite_url,
            types=types,
            stats=tuple(stats),
            abilities=abilities,
        )

    # The persisted format mirrors the API shape so either can be read back
    from_dict = from_api

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sprites": {"front_default": self.sprite_url},
            "types": [{"type": {"name": t.category}} for t in self.types],
            "stats": [{"stat": {"name": s.stat_name}, "base_stat": s.base_value} for s in self.stats],
            "abilities": [{"ability": {"name": a.ability_name}} for a in self.abilities],
        }


@dataclass(frozen=True)
class PageState:
    """State of one page load. Replaced, never merged, on page change."""
    page_number: int
    items: Tuple[DetailRecord, ...] = ()
    is_loading: bool = False
    error: Optional[str] = None

    @classmethod
    def loading(cls, page_number: int) -> "PageState":
        return cls(page_number=page_number, is_loading=True)


@dataclass(frozen=True)
class FilterState:
    search_term: str = ""
    selected_categories: FrozenSet[str] = field(default_factory=frozenset)

    def with_search_term(self, search_term: str) -> "FilterState":
        return FilterState(search_term, self.selected_categories)

    def with_category_toggled(self, category: str) -> "FilterState":
        if category in self.selected_categories:
            return FilterState(self.search_term, self.selected_categories - {category})
        return FilterState(self.search_term, self.selected_categories | {category})


@dataclass(frozen=True)
class CatalogItemView:
    record: DetailRecord
    is_favorite: bool


@dataclass(frozen=True)
class CatalogViewModel:
    """Read-only snapshot of everything the renderer draws."""
    visible_items: Tuple[CatalogItemView, ...]
    is_loading: bool
    error: Optional[str]
    page_number: int
    category_catalog: Tuple[str, ...]
    selected_categories: FrozenSet[str]
    search_term: str
    selected_detail_record: Optional[DetailRecord]
    favorite_count: int

    @property
    def can_go_back(self) -> bool:
        return self.page_number > 1
