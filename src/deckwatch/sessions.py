"""Session record loading — turns session-store exports into SessionRecord objects."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from deckwatch.models import SessionRecord


class SessionFileError(ValueError):
    """A sessions file or payload is not a list of session records."""


def parse_session_records(data: Any) -> list[SessionRecord]:
    """Validate decoded JSON/YAML and build records.

    Each item needs ``id``, ``project_path`` and ``status``. Optional keys:
    ``group_path``, ``conversation_id`` (or ``claude_session_id``),
    ``pane_id`` (or ``tmux_session``), ``title``.
    """
    if not isinstance(data, list):
        raise SessionFileError("expected a list of session records")

    records: list[SessionRecord] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise SessionFileError(f"record {i} is not a mapping")
        missing = [k for k in ("id", "project_path", "status") if not item.get(k)]
        if missing:
            raise SessionFileError(f"record {i} is missing {', '.join(missing)}")

        conversation_id = item.get("conversation_id") or item.get("claude_session_id")
        pane_id = item.get("pane_id") or item.get("tmux_session")
        records.append(SessionRecord(
            id=str(item["id"]),
            project_path=str(item["project_path"]),
            status=str(item["status"]),
            group_path=str(item.get("group_path") or ""),
            conversation_id=str(conversation_id) if conversation_id else None,
            pane_id=str(pane_id) if pane_id else None,
            title=str(item.get("title") or ""),
        ))
    return records


def load_session_records(path: Path) -> list[SessionRecord]:
    """Load records from a YAML or JSON file (JSON parses as YAML)."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SessionFileError(f"cannot parse {path}: {e}") from e
    return parse_session_records(data)
