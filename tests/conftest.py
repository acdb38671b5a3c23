import os
from datetime import datetime, timedelta, timezone

import pytest

from exek.candidates import app_candidate

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
	def __init__(self, now: datetime = T0) -> None:
		self.now = now

	def __call__(self) -> datetime:
		return self.now

	def advance(self, **kws) -> datetime:
		self.now += timedelta(**kws)
		return self.now


class FakeUsage:
	"""Frecency lookup backed by a plain dict; recording is forbidden."""

	def __init__(self, scores: dict[str, float] | None = None) -> None:
		self.scores = dict(scores or {})

	def frecency(self, key: str) -> float:
		return self.scores.get(key, 0.0)

	def record(self, key: str) -> None:
		raise AssertionError(f"ranking must not record usage ({key})")


def make_executable(path, body: str = "#!/bin/sh\n") -> None:
	path.write_text(body)
	os.chmod(path, 0o755)


@pytest.fixture
def clock() -> FakeClock:
	return FakeClock()


@pytest.fixture
def apps():
	return [
		app_candidate("Firefox", "firefox %u", "Browse the Web", ["Network", "WebBrowser"]),
		app_candidate("Files", "nautilus --new-window %U", "Access and organize files", ["GNOME", "Utility"]),
		app_candidate("Terminal", "gnome-terminal", "Use the command line", ["System", "TerminalEmulator"]),
		app_candidate("Calculator", "/usr/bin/gnome-calculator", None, ["Utility", "Calculator"]),
		app_candidate("htop", "htop", "Process viewer", ["System", "Monitor"], terminal=True),
	]


@pytest.fixture
def home(tmp_path):
	"""A fake home directory with a few directories and executables."""
	root = tmp_path / "home"
	(root / "Documents" / "notes").mkdir(parents=True)
	(root / "Downloads").mkdir()
	(root / "bin").mkdir()
	make_executable(root / "bin" / "deploy")
	make_executable(root / "bin" / "backup")
	(root / "bin" / "README").write_text("not executable\n")
	(root / "Documents" / "report.txt").write_text("plain file\n")
	make_executable(root / "Documents" / "run.sh")
	return root
