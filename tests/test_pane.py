"""Tests for the tmux pane probe."""

from __future__ import annotations

import subprocess

from deckwatch import pane as pane_module
from deckwatch.config import default_config
from deckwatch.pane import PaneProbe, capture_pane


def _fake_run(returncode=0, stdout=b"", stderr=b"", calls=None):
    def run(args, **kwargs):
        if calls is not None:
            calls.append(args)
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)

    return run


class TestCapturePane:
    def test_returns_pane_text(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            pane_module.subprocess, "run", _fake_run(stdout=b"hello\n", calls=calls),
        )
        assert capture_pane("deck_1", 20) == "hello\n"
        assert calls == [["tmux", "capture-pane", "-t", "deck_1", "-p", "-l", "20"]]

    def test_nonzero_exit_is_none(self, monkeypatch):
        monkeypatch.setattr(
            pane_module.subprocess,
            "run",
            _fake_run(returncode=1, stderr=b"can't find pane: deck_9"),
        )
        assert capture_pane("deck_9") is None

    def test_missing_tmux_is_none(self, monkeypatch):
        def run(args, **kwargs):
            raise FileNotFoundError("tmux")

        monkeypatch.setattr(pane_module.subprocess, "run", run)
        assert capture_pane("deck_1") is None


class TestPaneProbe:
    def test_detects_marker(self):
        probe = PaneProbe("deck_1", capture=lambda p, n: "Edit file?\nDo you want to proceed?\n")
        assert probe.is_waiting_for_input() is True

    def test_no_marker(self):
        probe = PaneProbe("deck_1", capture=lambda p, n: "> ")
        assert probe.is_waiting_for_input() is False

    def test_failed_capture(self):
        probe = PaneProbe("deck_1", capture=lambda p, n: None)
        assert probe.is_waiting_for_input() is False

    def test_empty_pane_id_skips_capture(self):
        calls = []

        def capture(pane_id, lines):
            calls.append(pane_id)
            return "Do you want to proceed?"

        assert PaneProbe("", capture=capture).is_waiting_for_input() is False
        assert calls == []

    def test_from_config(self):
        config = default_config()
        config.pane_lines = 40
        config.permission_marker = "Allow this action?"
        seen = []

        def capture(pane_id, lines):
            seen.append(lines)
            return "Allow this action?"

        probe = PaneProbe.from_config("deck_3", config, capture=capture)
        assert probe.is_waiting_for_input() is True
        assert seen == [40]

    def test_default_capture_uses_tmux(self, monkeypatch):
        monkeypatch.setattr(
            pane_module.subprocess,
            "run",
            _fake_run(stdout=b" Do you want to proceed?\n"),
        )
        assert PaneProbe("deck_1").is_waiting_for_input() is True
