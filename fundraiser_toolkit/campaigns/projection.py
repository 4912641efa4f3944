"""Allowlist filtering, de-duplication and cursor pagination."""

from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, List, Optional, Set, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class ProjectionPage(Generic[T]):
    items: List[T] = field(default_factory=list)
    total: int = 0
    next_cursor: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "items": [
                item.to_dict() if hasattr(item, "to_dict") else item
                for item in self.items
            ],
            "total": self.total,
            "nextCursor": self.next_cursor,
        }


def normalize_allowlist(addresses: Iterable[str]) -> Set[str]:
    return {a.strip().lower() for a in addresses if a and a.strip()}


def filter_and_dedupe(items: Iterable[T], allowlist: Iterable[str]) -> List[T]:
    """
    Keep allowlisted items, first occurrence per (address, campaign id).

    Input order is preserved; callers pass items newest-first so the most
    recently created record wins.
    """
    allowed = normalize_allowlist(allowlist)
    seen: Set[Tuple[str, Any]] = set()
    kept: List[T] = []
    for item in items:
        address = (getattr(item, "contract_address", "") or "").strip().lower()
        if not address or address not in allowed:
            continue
        key = (address, getattr(item, "campaign_id", None))
        if key in seen:
            continue
        seen.add(key)
        kept.append(item)
    return kept


def paginate(items: List[T], offset: int, limit: int) -> ProjectionPage[T]:
    offset = max(0, offset)
    page = items[offset : offset + limit]
    end = offset + len(page)
    return ProjectionPage(
        items=page,
        total=len(items),
        next_cursor=end if end < len(items) else None,
    )


def project(
    items: Iterable[T], allowlist: Iterable[str], offset: int, limit: int
) -> ProjectionPage[T]:
    """Filter, de-duplicate and page ``items``."""
    return paginate(filter_and_dedupe(items, allowlist), offset, limit)
