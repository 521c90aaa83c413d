"""Two-level specialty taxonomy (parent -> children) and the specialty match rule.

The backend already returns top-level specialties with their children
embedded, so building the index is mostly a matter of trusting that shape.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Collection, Dict, Iterable, List, Optional, Tuple

from .cleaning import slugify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Specialty:
    id: int
    name: str
    slug: str = ""
    parent_id: Optional[int] = None
    children: Tuple["Specialty", ...] = field(default_factory=tuple)

    @property
    def child_ids(self) -> Tuple[int, ...]:
        return tuple(child.id for child in self.children)


def _specialty_from_record(record: Dict[str, Any], parent_id: Optional[int] = None) -> Specialty:
    children = tuple(
        _specialty_from_record(child, parent_id=int(record["id"]))
        for child in (record.get("children") or [])
        if isinstance(child, dict) and child.get("id") is not None
    )
    raw_parent = record.get("parent_id")
    if raw_parent is None:
        raw_parent = parent_id
    return Specialty(
        id=int(record["id"]),
        name=str(record.get("naziv") or record.get("name") or ""),
        slug=str(record.get("slug") or ""),
        parent_id=int(raw_parent) if raw_parent is not None else None,
        children=children,
    )


def build_specialty_hierarchy(records: Iterable[Dict[str, Any]]) -> List[Specialty]:
    """Build the top-level specialty list from backend records.

    Each record is trusted to embed its own ``children``; a missing or null
    ``children`` field means no children. Records without an id are skipped.
    """
    hierarchy = []
    for record in records:
        if not isinstance(record, dict) or record.get("id") is None:
            logger.debug(f"Skipping specialty record without id: {record!r}")
            continue
        hierarchy.append(_specialty_from_record(record))
    return hierarchy


def resolve_parent(hierarchy: Iterable[Specialty], specialty_id: Optional[int]) -> Optional[Specialty]:
    """Find a top-level specialty by id (linear scan)."""
    if specialty_id is None:
        return None
    for specialty in hierarchy:
        if specialty.id == specialty_id:
            return specialty
    return None


def matches_specialty(
    specialty_id: Optional[int],
    parent_id: Optional[int],
    sub_ids: Collection[int],
    hierarchy: Iterable[Specialty],
) -> bool:
    """Does a single specialty id pass the parent / sub-specialty selection?

    - no parent selected: always True
    - sub-specialties selected: only those exact ids match; the parent does not
    - parent only: the parent itself or any of its children
    - a missing specialty id never matches an active selection
    """
    if parent_id is None:
        return True
    if specialty_id is None:
        return False
    if sub_ids:
        return specialty_id in sub_ids
    if specialty_id == parent_id:
        return True
    parent = resolve_parent(hierarchy, parent_id)
    if parent is None:
        return False
    return specialty_id in parent.child_ids


def matches_any_specialty(
    specialty_ids: Iterable[Optional[int]],
    parent_id: Optional[int],
    sub_ids: Collection[int],
    hierarchy: Iterable[Specialty],
) -> bool:
    """OR of :func:`matches_specialty` over several ids (a clinic's doctors)."""
    if parent_id is None:
        return True
    hierarchy = list(hierarchy)
    return any(matches_specialty(sid, parent_id, sub_ids, hierarchy) for sid in specialty_ids)


def find_specialty_by_slug(hierarchy: Iterable[Specialty], slug: str) -> Optional[Specialty]:
    """Top-level specialty whose slug, or slugified name, equals ``slug``."""
    wanted = slugify(slug)
    if not wanted:
        return None
    for specialty in hierarchy:
        if specialty.slug == wanted or slugify(specialty.name) == wanted:
            return specialty
    return None


def get_specialty_options(hierarchy: Iterable[Specialty]) -> List[Tuple[int, str]]:
    return [(specialty.id, specialty.name) for specialty in hierarchy]


def get_sub_specialty_options(hierarchy: Iterable[Specialty], parent_id: Optional[int]) -> List[Tuple[int, str]]:
    parent = resolve_parent(hierarchy, parent_id)
    if parent is None:
        return []
    return [(child.id, child.name) for child in parent.children]
