import curses
import os
import sys
from signal import SIGTERM, Signals, signal
from typing import Any

from . import PROG_NAME
from .config import CACHE_DIR, CONFIG_FILE, Settings, load_settings
from .desktop import from_paths, scan
from .launch import launch
from .log import logger, setup_logging
from .metadata import subtext
from .session import Engine, Launch, Resize, SessionState, initial_state, reduce
from .ui import Renderer, key_to_event
from .usage import StoreError, UsageStore


class Terminated(Exception):
	pass


def build_engine(settings: Settings, store: UsageStore) -> Engine:
	apps = scan(settings.desktop_dirs)
	if settings.show_paths:
		apps += from_paths(p for p, _ in store.frequent_paths())

	return Engine(apps, store, settings.recent_limit)


def run_session(stdscr, engine: Engine) -> SessionState:
	renderer = Renderer(stdscr, subtext)
	state = initial_state(engine, renderer.height())
	while not state.done:
		if (height := renderer.height()) != state.height:
			state = reduce(state, Resize(height), engine)

		renderer.draw(state)
		try:
			key = stdscr.get_wch()
		except curses.error:
			continue

		if key == curses.KEY_RESIZE:
			continue

		if (event := key_to_event(key)) is not None:
			state = reduce(state, event, engine)

	return state


def _curses_main(stdscr, engine: Engine) -> SessionState:
	curses.raw()
	return run_session(stdscr, engine)


def finish(state: SessionState, store: UsageStore, settings: Settings) -> int:
	match state.outcome:
		case Launch() as outcome:
			status = 0
			try:
				store.record(outcome.key)
			except StoreError as e:
				print(f"{PROG_NAME}: launch history not saved: {e}", file=sys.stderr)
				status = 1

			if not launch(outcome.target, settings.terminal, settings.extra_path):
				print(f"{PROG_NAME}: failed to launch {outcome.key}", file=sys.stderr)
				return 1

			return status
		case "cancelled":
			logger.info("Session cancelled")
			return 0

	logger.warning(f"Session ended without an outcome: {state.outcome!r}")
	return 0


def main() -> int:
	settings = load_settings(CONFIG_FILE)
	setup_logging(settings.log_level, fallback_dir=CACHE_DIR)
	logger.notice(f"{PROG_NAME.capitalize()} started (UID={os.getuid()})")
	try:
		store = UsageStore.load(settings.store_file)
	except StoreError as e:
		logger.critical(f"Cannot load usage history: {e}")
		print(f"{PROG_NAME}: {e}", file=sys.stderr)
		return 1

	engine = build_engine(settings, store)

	def quit_handler(signum: int, *_: Any) -> None:
		logger.notice(f"Received {Signals(signum).name}, shutting down")
		raise Terminated

	signal(SIGTERM, quit_handler)
	os.environ.setdefault("ESCDELAY", "25")
	try:
		state = curses.wrapper(_curses_main, engine)
	except (KeyboardInterrupt, Terminated):
		logger.info("Session interrupted")
		return 0
	except Exception:
		logger.critical("Fatal error in session loop", exc_info=True)
		raise

	status = finish(state, store, settings)
	logger.notice(f"{PROG_NAME.capitalize()} stopped (status={status})")
	return status
