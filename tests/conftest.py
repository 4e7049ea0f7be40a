"""Shared test fixtures for deckwatch tests."""

import json
from dataclasses import replace

import pytest

from deckwatch.config import TRANSCRIPTS_DIR_ENV, default_config
from deckwatch.transcript import TranscriptStore, encode_project_dir

PROJECT_PATH = "/Users/tester/dev/app"


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    """Keep a developer's DECKWATCH_TRANSCRIPTS_DIR out of the tests."""
    monkeypatch.delenv(TRANSCRIPTS_DIR_ENV, raising=False)


@pytest.fixture
def transcripts_root(tmp_path):
    """Empty transcripts root, laid out like ~/.claude/projects."""
    root = tmp_path / "projects"
    root.mkdir()
    return root


@pytest.fixture
def store(transcripts_root):
    return TranscriptStore(transcripts_root)


@pytest.fixture
def config(transcripts_root):
    """Default config pointed at the temporary transcripts root."""
    return replace(default_config(), transcripts_dir=transcripts_root)


@pytest.fixture
def write_transcript(transcripts_root):
    """Write JSONL lines for a conversation; returns the file path.

    ``dir_suffix`` mimics a worktree directory name.
    """

    def _write(conversation_id, lines, project_path=PROJECT_PATH, dir_suffix=""):
        project_dir = transcripts_root / (encode_project_dir(project_path) + dir_suffix)
        project_dir.mkdir(parents=True, exist_ok=True)
        path = project_dir / f"{conversation_id}.jsonl"
        with open(path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line if isinstance(line, str) else json.dumps(line))
                f.write("\n")
        return path

    return _write
