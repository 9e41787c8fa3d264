"""Offset pagination helpers shared by list endpoints."""
from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy import Select


@dataclass(frozen=True, slots=True)
class PageRequest:
    """A 1-based page number and a positive page size."""

    page: int
    limit: int

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total_count: int, limit: int) -> int:
    """Number of pages needed to show ``total_count`` rows, ``limit`` at a time."""

    if total_count <= 0:
        return 0
    return math.ceil(total_count / limit)


def apply_page(stmt: Select, page: PageRequest) -> Select:
    return stmt.offset(page.offset).limit(page.limit)
