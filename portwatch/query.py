"""Sorting and pagination of a snapshot for the list endpoint."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .models import SORT_FIELDS, Service, field_key

@dataclass(frozen=True)
class Page:
    data: list[Service]
    total: int
    page: int
    page_size: int

    def to_dict(self) -> dict:
        return {
            "data": [s.to_dict() for s in self.data],
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
        }

def sort_services(services: Sequence[Service], sort_by: Optional[str],
                  sort_order: Optional[str] = None) -> list[Service]:
    """
    Stable sort on one record field. Unknown or missing `sort_by` keeps the
    original order. 'desc' flips the comparison, so ties stay in input order.
    """
    attr = SORT_FIELDS.get(sort_by or "")
    if attr is None:
        return list(services)
    return sorted(services, key=lambda s: field_key(s, attr), reverse=(sort_order == "desc"))

def query(services: Sequence[Service], sort_by: Optional[str] = None, sort_order: Optional[str] = None,
          page: Optional[int] = None, page_size: Optional[int] = None) -> Page:
    ordered = sort_services(services, sort_by, sort_order)
    size = DEFAULT_PAGE_SIZE if page_size is None else max(0, min(page_size, MAX_PAGE_SIZE))
    page = 1 if page is None else max(page, 1)
    start = (page - 1) * size
    return Page(data=ordered[start:start + size], total=len(ordered), page=page, page_size=size)
