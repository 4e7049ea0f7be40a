"""Session summary builder — attention status plus display extracts from the transcript.

The extract functions are pure and best-effort: each returns None when the
window holds nothing useful.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from deckwatch.classifier import classify
from deckwatch.config import DeckwatchConfig, default_config
from deckwatch.models import (
    AttentionStatus,
    CoarseStatus,
    SessionSummary,
    TranscriptEntry,
)
from deckwatch.pane import PaneProbe
from deckwatch.transcript import TranscriptStore

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 200

Lines = Sequence[dict[str, Any] | TranscriptEntry]


def _entries(lines: Lines) -> list[TranscriptEntry]:
    return [
        line if isinstance(line, TranscriptEntry) else TranscriptEntry.from_json(line)
        for line in lines
    ]


def _truncate(text: str, limit: int = MAX_TEXT_CHARS) -> str:
    # str slicing counts code points, so multi-byte characters stay whole
    return text[:limit]


def _first_text(entry: TranscriptEntry) -> str | None:
    for text in entry.texts():
        trimmed = text.strip()
        if trimmed:
            return trimmed
    return None


def extract_summary(lines: Lines) -> str | None:
    """Most recent ``type == "summary"`` text."""
    for entry in reversed(_entries(lines)):
        if entry.type == "summary" and entry.summary is not None:
            return entry.summary
    return None


def extract_initial_prompt(head_lines: Lines) -> str | None:
    """First non-empty user text in the head window, truncated."""
    for entry in _entries(head_lines):
        if entry.role != "user":
            continue
        text = _first_text(entry)
        if text is not None:
            return _truncate(text)
    return None


def extract_last_tool(lines: Lines) -> str | None:
    """Name of the tool in the most recent assistant turn that used one."""
    for entry in reversed(_entries(lines)):
        if entry.role != "assistant":
            continue
        tools = entry.tool_uses()
        if tools:
            return tools[0].name
    return None


def extract_last_text(lines: Lines) -> str | None:
    """Most recent non-empty assistant text, truncated."""
    for entry in reversed(_entries(lines)):
        if entry.role != "assistant":
            continue
        text = _first_text(entry)
        if text is not None:
            return _truncate(text)
    return None


def compute_attention(
    store: TranscriptStore,
    project_path: str,
    conversation_id: str | None,
    coarse: CoarseStatus | str,
    pane: PaneProbe | None = None,
    *,
    config: DeckwatchConfig | None = None,
    now: float | None = None,
) -> AttentionStatus:
    """Attention status only, skipping the display extracts."""
    if config is None:
        config = default_config()
    tail = store.read_tail(project_path, conversation_id)
    if tail is None:
        logger.debug(
            "no transcript for %s in %s, using coarse status",
            conversation_id,
            project_path,
        )
    return classify(
        coarse,
        tail,
        pane,
        now=now,
        stale_after_seconds=config.stale_after_seconds,
        strategy=config.strategy,
    )


def build_session_summary(
    store: TranscriptStore,
    project_path: str,
    conversation_id: str | None,
    coarse: CoarseStatus | str,
    pane: PaneProbe | None = None,
    *,
    config: DeckwatchConfig | None = None,
    now: float | None = None,
) -> SessionSummary:
    """Locate the transcript once, then classify and extract display fields."""
    if config is None:
        config = default_config()

    path = store.locate(project_path, conversation_id)
    if path is None:
        return SessionSummary(
            attention=classify(
                coarse,
                None,
                pane,
                stale_after_seconds=config.stale_after_seconds,
                strategy=config.strategy,
            ),
        )

    tail = _entries(store.tail(path))
    head = store.head(path)

    return SessionSummary(
        attention=classify(
            coarse,
            tail,
            pane,
            now=now,
            stale_after_seconds=config.stale_after_seconds,
            strategy=config.strategy,
        ),
        summary=extract_summary(tail),
        initial_prompt=extract_initial_prompt(head),
        last_tool=extract_last_tool(tail),
        last_text=extract_last_text(tail),
    )
