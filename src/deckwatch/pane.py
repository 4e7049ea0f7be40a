"""tmux pane probe — looks for a live permission prompt on screen.

Claude Code draws its permission prompt before the matching tool_use line is
flushed to the transcript, so the visible pane can be ahead of the log.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable

logger = logging.getLogger(__name__)

PERMISSION_MARKER = "Do you want to proceed?"
DEFAULT_PANE_LINES = 20


def capture_pane(pane_id: str, lines: int = DEFAULT_PANE_LINES) -> str | None:
    """Return the last ``lines`` visible lines of a tmux pane, or None on failure."""
    try:
        result = subprocess.run(
            ["tmux", "capture-pane", "-t", pane_id, "-p", "-l", str(lines)],
            capture_output=True,
        )
    except OSError as e:
        logger.debug("tmux capture-pane failed to start for %s: %s", pane_id, e)
        return None

    if result.returncode != 0:
        logger.debug(
            "tmux capture-pane exited %s for %s: %s",
            result.returncode,
            pane_id,
            result.stderr.decode("utf-8", errors="replace").strip(),
        )
        return None

    return result.stdout.decode("utf-8", errors="replace")


class PaneProbe:
    """A pane identifier plus the means to check it for a permission prompt."""

    def __init__(
        self,
        pane_id: str,
        lines: int = DEFAULT_PANE_LINES,
        marker: str = PERMISSION_MARKER,
        capture: Callable[[str, int], str | None] = capture_pane,
    ):
        self.pane_id = pane_id
        self.lines = lines
        self.marker = marker
        self._capture = capture

    @classmethod
    def from_config(cls, pane_id: str, config, **kwargs) -> PaneProbe:
        return cls(
            pane_id,
            lines=config.pane_lines,
            marker=config.permission_marker,
            **kwargs,
        )

    def is_waiting_for_input(self) -> bool:
        """True if the pane currently shows the permission prompt.

        An empty pane id or a failed capture counts as no signal.
        """
        if not self.pane_id:
            return False
        text = self._capture(self.pane_id, self.lines)
        if text is None:
            return False
        return self.marker in text

    def __repr__(self) -> str:
        return f"PaneProbe({self.pane_id!r})"
