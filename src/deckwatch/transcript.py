"""Transcript store — finds and reads bounded windows of Claude Code JSONL logs.

Transcripts live under a root directory with one subdirectory per project,
named after the project path with ``/`` replaced by ``-``. Worktree checkouts
get a suffixed directory name, so a prefix match is accepted as a fallback.

Reads never raise: a missing or unreadable file yields an empty list, and
lines that fail to decode (usually a line still being written) are dropped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TAIL_BYTES = 256 * 1024
DEFAULT_HEAD_BYTES = 32 * 1024


def encode_project_dir(project_path: str) -> str:
    """'/Users/me/dev/app' -> '-Users-me-dev-app'"""
    return project_path.replace("/", "-")


class TranscriptStore:
    """Read-only access to the transcripts root directory."""

    def __init__(
        self,
        root: Path,
        tail_bytes: int = DEFAULT_TAIL_BYTES,
        head_bytes: int = DEFAULT_HEAD_BYTES,
    ):
        self.root = Path(root)
        self.tail_bytes = tail_bytes
        self.head_bytes = head_bytes

    @classmethod
    def from_config(cls, config) -> TranscriptStore:
        return cls(
            config.transcripts_dir,
            tail_bytes=config.tail_bytes,
            head_bytes=config.head_bytes,
        )

    def locate(self, project_path: str, conversation_id: str | None) -> Path | None:
        """Return the transcript path for a conversation, or None."""
        if not conversation_id:
            return None

        encoded = encode_project_dir(project_path)
        file_name = f"{conversation_id}.jsonl"

        candidate = self.root / encoded / file_name
        if candidate.is_file():
            return candidate

        # Worktree directories carry a suffix after the encoded project path
        try:
            entries = sorted(self.root.iterdir())
        except OSError as e:
            logger.debug("cannot list transcripts root %s: %s", self.root, e)
            return None

        for entry in entries:
            if not entry.name.startswith(encoded):
                continue
            candidate = entry / file_name
            if candidate.is_file():
                return candidate

        return None

    def tail(self, path: Path, max_bytes: int | None = None) -> list[dict[str, Any]]:
        """Parse the JSONL objects in the last ``max_bytes`` of a file."""
        if max_bytes is None:
            max_bytes = self.tail_bytes

        try:
            with open(path, "rb") as f:
                f.seek(0, 2)
                size = f.tell()
                seek_pos = max(0, size - max_bytes)
                f.seek(seek_pos)
                # Mid-file seek lands inside a line; drop the fragment
                if seek_pos > 0:
                    f.readline()
                return list(_parse_lines(f))
        except OSError as e:
            logger.debug("cannot read transcript tail %s: %s", path, e)
            return []

    def head(self, path: Path, max_bytes: int | None = None) -> list[dict[str, Any]]:
        """Parse JSONL objects from the start of a file, up to ``max_bytes``."""
        if max_bytes is None:
            max_bytes = self.head_bytes

        try:
            with open(path, "rb") as f:
                return list(_parse_lines(_bounded_lines(f, max_bytes)))
        except OSError as e:
            logger.debug("cannot read transcript head %s: %s", path, e)
            return []

    def read_tail(
        self, project_path: str, conversation_id: str | None,
    ) -> list[dict[str, Any]] | None:
        """Locate and tail a transcript. None means no transcript exists."""
        path = self.locate(project_path, conversation_id)
        if path is None:
            return None
        return self.tail(path)

    def read_head(
        self, project_path: str, conversation_id: str | None,
    ) -> list[dict[str, Any]] | None:
        path = self.locate(project_path, conversation_id)
        if path is None:
            return None
        return self.head(path)


def _bounded_lines(f, max_bytes: int) -> Iterable[bytes]:
    consumed = 0
    for raw in f:
        yield raw
        consumed += len(raw)
        if consumed > max_bytes:
            break


def _parse_lines(lines: Iterable[bytes]) -> Iterable[dict[str, Any]]:
    for raw in lines:
        try:
            line = raw.decode("utf-8").strip()
        except UnicodeDecodeError:
            continue
        if not line:
            continue
        try:
            data = json.loads(line)
        except (ValueError, RecursionError):
            continue
        if isinstance(data, dict):
            yield data
