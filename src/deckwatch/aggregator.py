"""Attention aggregation across sessions, for dashboard badges.

Only sessions whose coarse status is waiting or error are classified; the
rest cannot need attention and skip the transcript read. Pane probes are
never run here, since shelling out per session on every refresh is too slow.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from deckwatch.config import DeckwatchConfig, default_config
from deckwatch.models import (
    AttentionCounts,
    AttentionStatus,
    CoarseStatus,
    SessionRecord,
)
from deckwatch.summary import compute_attention
from deckwatch.transcript import TranscriptStore

logger = logging.getLogger(__name__)

CANDIDATE_STATUSES = frozenset({CoarseStatus.WAITING, CoarseStatus.ERROR})

GROUP_WAITING = "waiting"
GROUP_ERROR = "error"

BADGE_STATUS = {
    AttentionStatus.NEEDS_INPUT: GROUP_WAITING,
    AttentionStatus.ERROR: GROUP_ERROR,
}


def merge_group_status(current: str | None, incoming: str) -> str:
    """Worst status for a group: waiting beats error and is never downgraded."""
    if current == GROUP_WAITING or incoming == GROUP_WAITING:
        return GROUP_WAITING
    return incoming


def _actionable(
    records: Iterable[SessionRecord],
    store: TranscriptStore,
    config: DeckwatchConfig,
    now: float | None,
) -> Iterable[tuple[SessionRecord, str]]:
    for record in records:
        if record.coarse not in CANDIDATE_STATUSES:
            continue
        attention = compute_attention(
            store,
            record.project_path,
            record.conversation_id,
            record.coarse,
            config=config,
            now=now,
        )
        badge = BADGE_STATUS.get(attention)
        if badge is None:
            logger.debug(
                "session %s is %s, no longer actionable", record.id, attention.value,
            )
            continue
        yield record, badge


def aggregate_attention(
    records: Iterable[SessionRecord],
    store: TranscriptStore,
    *,
    config: DeckwatchConfig | None = None,
    now: float | None = None,
) -> AttentionCounts:
    """Count sessions needing attention and the worst status per group."""
    if config is None:
        config = default_config()

    counts = AttentionCounts()
    for record, badge in _actionable(records, store, config, now):
        counts.total += 1
        counts.groups[record.group_path] = merge_group_status(
            counts.groups.get(record.group_path), badge,
        )
    return counts


def attention_sessions(
    records: Iterable[SessionRecord],
    store: TranscriptStore,
    *,
    config: DeckwatchConfig | None = None,
    now: float | None = None,
) -> list[SessionRecord]:
    """Sessions that still need attention, in input order."""
    if config is None:
        config = default_config()
    return [record for record, _ in _actionable(records, store, config, now)]
