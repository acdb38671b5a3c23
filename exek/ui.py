"""Curses renderer and key mapping. Draws SessionState, never changes it."""

import curses

from .candidates import PathCompletion, ScoredResult
from .session import (
	ACCEPT,
	BACKSPACE,
	CANCEL,
	CONFIRM,
	DELETE,
	DOWN,
	END,
	HOME,
	LEFT,
	PAGE_DOWN,
	PAGE_UP,
	RIGHT,
	UP,
	Applications,
	Event,
	Insert,
	SessionState,
)

QUERY_ROWS = 3
# Top and bottom border of the result box.
FRAME_ROWS = 2

KEY_EVENTS = {
	"\x1b": CANCEL,
	"\x03": CANCEL,
	"\t": ACCEPT,
	"\n": CONFIRM,
	"\r": CONFIRM,
	"\x7f": BACKSPACE,
	"\x08": BACKSPACE,
	"\x10": UP,
	"\x0b": UP,
	"\x0e": DOWN,
	"\x01": HOME,
	"\x05": END,
	curses.KEY_ENTER: CONFIRM,
	curses.KEY_BACKSPACE: BACKSPACE,
	curses.KEY_DC: DELETE,
	curses.KEY_LEFT: LEFT,
	curses.KEY_RIGHT: RIGHT,
	curses.KEY_HOME: HOME,
	curses.KEY_END: END,
	curses.KEY_UP: UP,
	curses.KEY_DOWN: DOWN,
	curses.KEY_PPAGE: PAGE_UP,
	curses.KEY_NPAGE: PAGE_DOWN,
}


def key_to_event(key: str | int) -> Event | None:
	if (event := KEY_EVENTS.get(key)) is not None:
		return event

	if isinstance(key, str) and key.isprintable():
		return Insert(key)

	return None


def viewport_height(screen_rows: int) -> int:
	return max(1, screen_rows - QUERY_ROWS - FRAME_ROWS)


def app_row(result: ScoredResult) -> str:
	app = result.candidate
	row = app.name
	if app.description:
		row += f" - {app.description}"
	if result.frecency > 0 and app.categories:
		row += f" [{app.categories[0]}]"

	return row


def path_row(item: PathCompletion, subtext: str = "") -> str:
	marker = "[d]" if item.is_dir else "[x]"
	row = f"{marker} {item.display}{'/' * (item.is_dir and not item.display.endswith('/'))}"
	return f"{row}  {subtext}" if subtext else row


class Renderer:
	def __init__(self, stdscr, subtext=None) -> None:
		self.stdscr = stdscr
		self.subtext = subtext
		curses.curs_set(1)
		self.stdscr.keypad(True)
		self.attr_title = curses.A_BOLD
		self.attr_selected = curses.A_REVERSE | curses.A_BOLD
		self.attr_dim = curses.A_DIM
		if curses.has_colors():
			curses.start_color()
			try:
				curses.use_default_colors()
			except curses.error:
				pass
			curses.init_pair(1, curses.COLOR_CYAN, -1)
			curses.init_pair(2, curses.COLOR_YELLOW, -1)
			self.attr_title = curses.color_pair(1) | curses.A_BOLD
			self.attr_selected = curses.color_pair(2) | curses.A_BOLD | curses.A_REVERSE

	def height(self) -> int:
		rows, _ = self.stdscr.getmaxyx()
		return viewport_height(rows)

	def _box(self, y: int, x: int, h: int, w: int, title: str) -> None:
		win = self.stdscr.derwin(h, w, y, x)
		win.border()
		win.addnstr(0, 2, title, max(0, w - 4), self.attr_title)

	def draw(self, state: SessionState) -> None:
		self.stdscr.erase()
		rows, cols = self.stdscr.getmaxyx()
		if rows < QUERY_ROWS + FRAME_ROWS + 1 or cols < 8:
			self.stdscr.addnstr(0, 0, "terminal too small", max(0, cols - 1))
			self.stdscr.refresh()
			return

		self._box(0, 0, QUERY_ROWS, cols, " Search ")
		width = cols - 2
		start = max(0, state.cursor - width + 1)
		self.stdscr.addnstr(1, 1, state.query[start:], width)

		if isinstance(state.mode, Applications):
			title = f" Applications ({state.result_count}) "
		else:
			title = f" Path Completions ({state.result_count}) "

		self._box(QUERY_ROWS, 0, rows - QUERY_ROWS, cols, title)
		for i, item in enumerate(state.visible()[: viewport_height(rows)]):
			index = state.scroll + i
			if isinstance(item, PathCompletion):
				text = path_row(item, self.subtext(item.path, item.is_dir) if self.subtext else "")
			else:
				text = app_row(item)

			attr = self.attr_selected if index == state.selected else curses.A_NORMAL
			self.stdscr.addnstr(QUERY_ROWS + 1 + i, 1, text.ljust(width), width, attr)

		self.stdscr.move(1, 1 + min(state.cursor - start, width - 1))
		self.stdscr.refresh()
