import uuid
from dataclasses import dataclass
from typing import Any, List, Optional

from api.config import settings
from api.errors import InvalidInput


def parse_int_or_fallback(value: Any, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def parse_id(value: Optional[str], label: str) -> str:
    """Canonicalise an identifier or fail with `Invalid <label> ID`."""
    try:
        return str(uuid.UUID(str(value)))
    except (TypeError, ValueError, AttributeError):
        raise InvalidInput(f"Invalid {label} ID")


def clean_text(value: Optional[str]) -> str:
    return value.strip() if value else ""


@dataclass(frozen=True)
class Page:
    """Clamped page/limit pair from free-form query values."""
    page: int
    limit: int

    @classmethod
    def from_query(cls, page: Any = 1, limit: Any = None) -> "Page":
        page = max(1, parse_int_or_fallback(page, 1))
        limit = parse_int_or_fallback(limit, settings.DEFAULT_PAGE_SIZE)
        limit = max(1, min(settings.MAX_PAGE_SIZE, limit))
        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def window(self, sequence: List[Any]) -> List[Any]:
        return sequence[self.offset:self.offset + self.limit]

    def envelope(self, total: int, items: List[Any]) -> dict:
        return {
            "total": total,
            "page": self.page,
            "limit": self.limit,
            "items": items,
        }
