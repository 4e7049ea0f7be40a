"""Attention classifier — fuses coarse status, transcript tail, and pane snapshot.

All functions here are pure apart from the optional pane probe, which is only
consulted to upgrade a Running result. Every path returns a concrete
AttentionStatus; bad or missing input degrades to a coarse-status fallback.

Rule order:

1. No transcript at all: fall back to the coarse status (waiting -> idle).
2. Coarse "waiting": needs_input once the assistant has replied, else idle.
3. No conversational entries: coarse fallback.
4. Last conversational entry is an assistant turn calling an interactive
   tool (question, plan mode): needs_input.
5. Last entry older than the staleness threshold: stale.
6. Coarse running/error pass through, anything else is idle.
7. Running + pane showing a permission prompt: needs_input.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from deckwatch.models import AttentionStatus, CoarseStatus, TranscriptEntry
from deckwatch.pane import PaneProbe

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER_SECONDS = 3600.0
DEFAULT_STRATEGY = "allow_list"

# Tools that always stop for a human decision, whatever the approval mode.
INTERACTIVE_TOOLS = frozenset({"AskUserQuestion", "EnterPlanMode", "ExitPlanMode"})

NeedsInputCheck = Callable[[TranscriptEntry, Sequence[TranscriptEntry]], bool]
Strategy = Callable[[CoarseStatus, Sequence[TranscriptEntry], float, float], AttentionStatus]


class UnknownStrategyError(KeyError):
    """Raised when a classification strategy name is not registered."""


def coarse_fallback(coarse: CoarseStatus | str) -> AttentionStatus:
    """Status derived from the coarse status alone, for sessions without transcript signal.

    A waiting session with no conversation has only received its initial
    prompt, so it is idle rather than needing input.
    """
    coarse = CoarseStatus.parse(coarse)
    if coarse is CoarseStatus.WAITING:
        return AttentionStatus.IDLE
    if coarse is CoarseStatus.RUNNING:
        return AttentionStatus.RUNNING
    if coarse is CoarseStatus.ERROR:
        return AttentionStatus.ERROR
    return AttentionStatus.UNKNOWN


def calls_interactive_tool(
    last: TranscriptEntry, conversational: Sequence[TranscriptEntry],
) -> bool:
    return last.role == "assistant" and any(
        tool.name in INTERACTIVE_TOOLS for tool in last.tool_uses()
    )


def has_pending_tool_call(
    last: TranscriptEntry, conversational: Sequence[TranscriptEntry],
) -> bool:
    """Interactive tool, or any tool_use in the last turn without a tool_result."""
    if calls_interactive_tool(last, conversational):
        return True
    if last.role != "assistant":
        return False
    answered = {
        result.tool_use_id
        for entry in conversational
        for result in entry.tool_results()
    }
    return any(tool.id not in answered for tool in last.tool_uses())


def _classify_entries(
    coarse: CoarseStatus,
    entries: Sequence[TranscriptEntry],
    now: float,
    stale_after_seconds: float,
    needs_input: NeedsInputCheck,
) -> AttentionStatus:
    conversational = [e for e in entries if e.is_conversational]

    if coarse is CoarseStatus.WAITING:
        if any(e.role == "assistant" for e in conversational):
            return AttentionStatus.NEEDS_INPUT
        return AttentionStatus.IDLE

    if not conversational:
        return coarse_fallback(coarse)

    if needs_input(conversational[-1], conversational):
        return AttentionStatus.NEEDS_INPUT

    # tool_result is_error marks a rejected or failed tool call, not a failed
    # session; session failures only arrive as coarse "error".

    last_timestamp = entries[-1].timestamp
    if last_timestamp is not None and now - last_timestamp > stale_after_seconds:
        return AttentionStatus.STALE

    if coarse is CoarseStatus.RUNNING:
        return AttentionStatus.RUNNING
    if coarse is CoarseStatus.ERROR:
        return AttentionStatus.ERROR
    return AttentionStatus.IDLE


def classify_transcript(
    coarse: CoarseStatus,
    entries: Sequence[TranscriptEntry],
    now: float,
    stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS,
) -> AttentionStatus:
    """Allow-list rules: only interactive tools count as needing input.

    A tool_use without a tool_result is ambiguous between a permission
    prompt and a tool still executing, so it is left to pane refinement.
    """
    return _classify_entries(
        coarse, entries, now, stale_after_seconds, calls_interactive_tool,
    )


def classify_pending_tool(
    coarse: CoarseStatus,
    entries: Sequence[TranscriptEntry],
    now: float,
    stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS,
) -> AttentionStatus:
    """Earlier rules: any unanswered tool_use in the last turn needs input.

    Catches permission waits without a pane probe, at the cost of flagging
    every tool while it executes.
    """
    return _classify_entries(
        coarse, entries, now, stale_after_seconds, has_pending_tool_call,
    )


STRATEGIES: dict[str, Strategy] = {
    "allow_list": classify_transcript,
    "pending_tool": classify_pending_tool,
}


def get_strategy(name: str) -> Strategy:
    try:
        return STRATEGIES[name]
    except KeyError:
        raise UnknownStrategyError(
            f"unknown strategy {name!r}, expected one of {sorted(STRATEGIES)}"
        ) from None


def refine_with_pane(
    attention: AttentionStatus, pane: PaneProbe | None,
) -> AttentionStatus:
    """Upgrade Running to NeedsInput when the pane shows a permission prompt."""
    if attention is not AttentionStatus.RUNNING or pane is None:
        return attention
    if pane.is_waiting_for_input():
        logger.debug("pane %s shows a permission prompt", pane.pane_id)
        return AttentionStatus.NEEDS_INPUT
    return attention


def classify(
    coarse: CoarseStatus | str,
    transcript_tail: Sequence[dict[str, Any] | TranscriptEntry] | None,
    pane: PaneProbe | None = None,
    *,
    now: float | None = None,
    stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS,
    strategy: str = DEFAULT_STRATEGY,
) -> AttentionStatus:
    """Classify one session.

    Args:
        coarse: Status from the session supervisor.
        transcript_tail: Decoded JSONL objects from the end of the transcript,
            or None when there is no transcript (missing file or no
            conversation id).
        pane: Probe for the session's terminal pane, if it has one.
        now: Current epoch seconds; defaults to time.time().
        stale_after_seconds: Inactivity after which a session is stale.
        strategy: Name of the transcript rule set in STRATEGIES.

    Returns:
        The refined AttentionStatus.
    """
    coarse = CoarseStatus.parse(coarse)
    rules = get_strategy(strategy)

    if transcript_tail is None:
        attention = coarse_fallback(coarse)
    else:
        entries = [
            e if isinstance(e, TranscriptEntry) else TranscriptEntry.from_json(e)
            for e in transcript_tail
        ]
        if now is None:
            now = time.time()
        attention = rules(coarse, entries, now, stale_after_seconds)

    return refine_with_pane(attention, pane)
