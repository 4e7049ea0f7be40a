"""Shared data models — the contract between transcript reader, classifier, and consumers.

TranscriptStore produces raw JSON objects. TranscriptEntry gives them a typed
shape. The classifier turns entries into an AttentionStatus, and the summary
builder and aggregator package results for display.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class CoarseStatus(str, Enum):
    """Lifecycle status reported by the external session supervisor."""

    RUNNING = "running"
    WAITING = "waiting"
    ERROR = "error"
    IDLE = "idle"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | CoarseStatus | None) -> CoarseStatus:
        if isinstance(value, CoarseStatus):
            return value
        if not value:
            return cls.OTHER
        try:
            status = cls(value)
        except ValueError:
            return cls.OTHER
        return status


class AttentionStatus(str, Enum):
    """Refined status produced by the classifier."""

    NEEDS_INPUT = "needs_input"
    ERROR = "error"
    RUNNING = "running"
    IDLE = "idle"
    STALE = "stale"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TextItem:
    text: str


@dataclass(frozen=True)
class ToolUseItem:
    id: str | None
    name: str


@dataclass(frozen=True)
class ToolResultItem:
    tool_use_id: str | None
    is_error: bool = False


ContentItem = TextItem | ToolUseItem | ToolResultItem

CONVERSATIONAL_TYPES = ("assistant", "user")


@dataclass(frozen=True)
class TranscriptEntry:
    """A single JSONL line, reduced to the fields classification looks at."""

    type: str
    role: str | None = None
    content: tuple[ContentItem, ...] = ()
    timestamp: float | None = None
    summary: str | None = None

    @property
    def is_conversational(self) -> bool:
        return self.type in CONVERSATIONAL_TYPES

    def tool_uses(self) -> list[ToolUseItem]:
        return [item for item in self.content if isinstance(item, ToolUseItem)]

    def tool_results(self) -> list[ToolResultItem]:
        return [item for item in self.content if isinstance(item, ToolResultItem)]

    def texts(self) -> list[str]:
        return [item.text for item in self.content if isinstance(item, TextItem)]

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TranscriptEntry:
        """Build an entry from one decoded JSONL object.

        Lines without a ``message`` field are treated as their own message,
        so ``role`` and ``content`` are looked up on the line itself.
        Unknown content item types are skipped.
        """
        entry_type = data.get("type")
        if not isinstance(entry_type, str):
            entry_type = ""

        message = data.get("message")
        if not isinstance(message, dict):
            message = data

        role = message.get("role")
        if not isinstance(role, str):
            role = None

        summary = data.get("summary")
        if not isinstance(summary, str):
            summary = None

        return cls(
            type=entry_type,
            role=role,
            content=_parse_content(message.get("content")),
            timestamp=_parse_timestamp(data.get("timestamp")),
            summary=summary,
        )


@dataclass
class SessionSummary:
    """Display-ready record for one session."""

    attention: AttentionStatus
    summary: str | None = None
    initial_prompt: str | None = None
    last_tool: str | None = None
    last_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["attention"] = self.attention.value
        return data


@dataclass
class SessionRecord:
    """One session as supplied by the external session store."""

    id: str
    project_path: str
    status: str
    group_path: str = ""
    conversation_id: str | None = None
    pane_id: str | None = None
    title: str = ""

    @property
    def coarse(self) -> CoarseStatus:
        return CoarseStatus.parse(self.status)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class AttentionCounts:
    """Badge counts across sessions: total plus worst status per group."""

    total: int = 0
    groups: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "groups": dict(self.groups)}


def _parse_content(content: Any) -> tuple[ContentItem, ...]:
    if isinstance(content, str):
        return (TextItem(text=content),)
    if not isinstance(content, list):
        return ()

    items: list[ContentItem] = []
    for item in content:
        if not isinstance(item, dict):
            continue
        item_type = item.get("type", "")
        if item_type == "text":
            text = item.get("text", "")
            items.append(TextItem(text=text if isinstance(text, str) else ""))
        elif item_type == "tool_use":
            name = item.get("name", "")
            items.append(ToolUseItem(
                id=item.get("id"),
                name=name if isinstance(name, str) else "",
            ))
        elif item_type == "tool_result":
            items.append(ToolResultItem(
                tool_use_id=item.get("tool_use_id"),
                is_error=bool(item.get("is_error", False)),
            ))
    return tuple(items)


def _parse_timestamp(value: Any) -> float | None:
    """Normalise a timestamp to epoch seconds.

    Accepts numeric seconds or ISO 8601 strings (with a ``Z`` suffix).
    Anything else, including naive datetimes and numbers with no finite
    float value, yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            seconds = float(value)
        except OverflowError:
            return None
        return seconds if math.isfinite(seconds) else None
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed.timestamp()
