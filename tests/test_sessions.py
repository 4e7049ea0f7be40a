"""Tests for loading session records."""

import json

import pytest

from deckwatch.models import CoarseStatus, SessionRecord
from deckwatch.sessions import (
    SessionFileError,
    load_session_records,
    parse_session_records,
)


def test_load_yaml(tmp_path):
    path = tmp_path / "sessions.yaml"
    path.write_text(
        "- id: s1\n"
        "  project_path: /Users/tester/dev/app\n"
        "  status: waiting\n"
        "  group_path: work\n"
        "  conversation_id: conv-1\n"
        "  pane_id: deck_1\n"
        "  title: Dark mode\n"
    )
    assert load_session_records(path) == [
        SessionRecord(
            id="s1",
            project_path="/Users/tester/dev/app",
            status="waiting",
            group_path="work",
            conversation_id="conv-1",
            pane_id="deck_1",
            title="Dark mode",
        )
    ]


def test_load_json_with_store_field_names(tmp_path):
    """Exports from the session store use claude_session_id / tmux_session."""
    path = tmp_path / "sessions.json"
    path.write_text(json.dumps([
        {
            "id": "s2",
            "project_path": "/srv/api",
            "status": "error",
            "claude_session_id": "conv-2",
            "tmux_session": "deck_2",
        }
    ]))
    record = load_session_records(path)[0]
    assert record.conversation_id == "conv-2"
    assert record.pane_id == "deck_2"
    assert record.group_path == ""
    assert record.coarse == CoarseStatus.ERROR


def test_unknown_status_is_other():
    record = parse_session_records([{"id": "s", "project_path": "/p", "status": "paused"}])[0]
    assert record.coarse == CoarseStatus.OTHER


@pytest.mark.parametrize("status", ["RUNNING", " waiting ", "Error", ""])
def test_status_matched_exactly(status):
    assert CoarseStatus.parse(status) == CoarseStatus.OTHER


@pytest.mark.parametrize(
    "data",
    [
        {"id": "s1"},
        ["not a mapping"],
        [{"id": "s1", "status": "waiting"}],
        None,
    ],
)
def test_invalid_payloads(data):
    with pytest.raises(SessionFileError):
        parse_session_records(data)


def test_unparseable_file(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("- id: [unclosed\n")
    with pytest.raises(SessionFileError):
        load_session_records(path)
