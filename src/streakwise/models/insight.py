"""Coach insight records returned by the external text-generation service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from ..errors import ConfigurationError


class InsightKind(str, Enum):
    """Kinds of insight the coach service produces."""

    PATTERN = "pattern"
    SUGGESTION = "suggestion"
    SUMMARY = "summary"
    GENERAL = "general"

    @classmethod
    def parse(cls, raw: object) -> "InsightKind":
        """Map a raw ``type`` value onto a kind; anything unknown is GENERAL."""

        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        return cls.GENERAL


@dataclass(frozen=True, slots=True)
class Insight:
    """One insight card. Content is opaque to the statistics engine."""

    id: str
    kind: InsightKind
    title: str
    content: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Insight":
        created_raw = payload.get("created_at")
        created_at = None
        if isinstance(created_raw, datetime):
            created_at = created_raw
        elif isinstance(created_raw, str) and created_raw:
            try:
                created_at = datetime.fromisoformat(created_raw.replace("Z", "+00:00"))
            except ValueError as exc:
                raise ConfigurationError(f"Malformed insight timestamp: {created_raw!r}") from exc
        return cls(
            id=str(payload.get("id", "")),
            kind=InsightKind.parse(payload.get("type")),
            title=str(payload.get("title") or ""),
            content=str(payload.get("content") or ""),
            created_at=created_at,
        )


__all__ = ["Insight", "InsightKind"]
