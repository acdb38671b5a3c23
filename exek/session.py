"""
Interactive session as a pure reducer.

`reduce(state, event, engine)` returns the next `SessionState`; nothing is
mutated in place. Edits re-evaluate the mode (path completion for path-shaped
queries, application ranking otherwise) and reset selection and scroll.
Navigation only moves the selection and keeps it inside the viewport.
"""

from collections.abc import Sequence
from typing import NamedTuple

from .candidates import AppCandidate, PathCompletion, ScoredResult
from .completion import apply_completion, complete, is_path_query
from .log import logger
from .ranking import RECENT_LIMIT, FrecencySource, rank
from .usage import path_key


# ========== MODES ==========
class Applications(NamedTuple):
	results: tuple[ScoredResult, ...] = ()


class Paths(NamedTuple):
	completions: tuple[PathCompletion, ...] = ()


Mode = Applications | Paths


def mode_items(mode: Mode) -> tuple:
	match mode:
		case Applications(results):
			return results
		case Paths(completions):
			return completions

	msg = f"unknown mode {mode!r}"
	raise TypeError(msg)


# ========== EVENTS ==========
class Insert(NamedTuple):
	text: str


class Resize(NamedTuple):
	height: int


BACKSPACE = "backspace"
DELETE = "delete"
LEFT = "left"
RIGHT = "right"
HOME = "home"
END = "end"
UP = "up"
DOWN = "down"
PAGE_UP = "page-up"
PAGE_DOWN = "page-down"
ACCEPT = "accept"
CONFIRM = "confirm"
CANCEL = "cancel"

Event = Insert | Resize | str


# ========== OUTCOMES ==========
class Launch(NamedTuple):
	target: ScoredResult | PathCompletion

	@property
	def key(self) -> str:
		match self.target:
			case PathCompletion(path=path):
				return path_key(path)
			case ScoredResult(candidate=app):
				return app.key

		msg = f"cannot launch {self.target!r}"
		raise TypeError(msg)


CANCELLED = "cancelled"


# ========== STATE ==========
class SessionState(NamedTuple):
	query: str = ""
	cursor: int = 0
	mode: Mode = Applications()
	selected: int = 0
	scroll: int = 0
	height: int | None = None
	outcome: Launch | str | None = None

	@property
	def items(self) -> tuple:
		return mode_items(self.mode)

	@property
	def result_count(self) -> int:
		return len(self.items)

	@property
	def selected_item(self) -> ScoredResult | PathCompletion | None:
		items = self.items
		return items[self.selected] if items else None

	@property
	def done(self) -> bool:
		return self.outcome is not None

	def visible(self) -> tuple:
		"""Slice of the active items inside the viewport."""
		items = self.items
		if self.height is None:
			return items[self.scroll :]

		return items[self.scroll : self.scroll + self.height]


class Engine:
	"""Read-only collaborators the reducer ranks and completes against."""

	def __init__(
		self,
		apps: Sequence[AppCandidate],
		usage: FrecencySource,
		recent_limit: int = RECENT_LIMIT,
		home: str | None = None,
	) -> None:
		self.apps = tuple(apps)
		self.usage = usage
		self.recent_limit = recent_limit
		self.home = home

	def evaluate(self, query: str) -> Mode:
		if is_path_query(query):
			return Paths(tuple(complete(query, self.home)))

		return Applications(tuple(rank(query, self.apps, self.usage, self.recent_limit)))


# ========== TRANSITIONS ==========
def scroll_for(selected: int, scroll: int, height: int | None) -> int:
	if selected < scroll:
		return selected
	if height is not None and selected >= scroll + height:
		return selected - height + 1

	return scroll


def select(state: SessionState, index: int) -> SessionState:
	selected = min(max(0, index), max(0, state.result_count - 1))
	return state._replace(selected=selected, scroll=scroll_for(selected, state.scroll, state.height))


def edit(state: SessionState, query: str, cursor: int, engine: Engine) -> SessionState:
	mode = engine.evaluate(query)
	logger.debug(f"Query '{query}' -> {type(mode).__name__} ({len(mode_items(mode))} items)")
	return state._replace(query=query, cursor=cursor, mode=mode, selected=0, scroll=0)


def initial_state(engine: Engine, height: int | None = None) -> SessionState:
	return edit(SessionState(height=height), "", 0, engine)


def _accept(state: SessionState, item: PathCompletion, engine: Engine) -> SessionState:
	query = apply_completion(item)
	return edit(state, query, len(query), engine)


def reduce(state: SessionState, event: Event, engine: Engine) -> SessionState:
	if state.done:
		return state

	q, c = state.query, state.cursor
	page = max(1, state.height or 1)
	match event:
		case Insert(text) if text:
			return edit(state, q[:c] + text + q[c:], c + len(text), engine)
		case "backspace" if c > 0:
			return edit(state, q[: c - 1] + q[c:], c - 1, engine)
		case "delete" if c < len(q):
			return edit(state, q[:c] + q[c + 1 :], c, engine)
		case "left":
			return state._replace(cursor=max(0, c - 1))
		case "right":
			return state._replace(cursor=min(len(q), c + 1))
		case "home":
			return state._replace(cursor=0)
		case "end":
			return state._replace(cursor=len(q))
		case "up":
			return select(state, state.selected - 1)
		case "down":
			return select(state, state.selected + 1)
		case "page-up":
			return select(state, state.selected - page)
		case "page-down":
			return select(state, state.selected + page)
		case Resize(height):
			return select(state._replace(height=max(1, height)), state.selected)
		case "accept":
			match (state.mode, state.selected_item):
				case (Paths(), PathCompletion() as item):
					return _accept(state, item, engine)
		case "confirm":
			match (state.mode, state.selected_item):
				case (Paths(), PathCompletion(is_dir=True) as item):
					return _accept(state, item, engine)
				case (_, None):
					return state
				case (_, item):
					logger.info(f"Selection confirmed: {item!r}")
					return state._replace(outcome=Launch(item))
		case "cancel":
			return state._replace(outcome=CANCELLED)

	return state
