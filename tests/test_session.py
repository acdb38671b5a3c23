"""Tests for the session reducer."""

import random

import pytest

from exek.candidates import PathCompletion, app_candidate
from exek.session import (
	ACCEPT,
	BACKSPACE,
	CANCEL,
	CANCELLED,
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
	Engine,
	Insert,
	Launch,
	Paths,
	Resize,
	initial_state,
	reduce,
)
from exek.usage import path_key

from .conftest import FakeUsage

NAVIGATION = [UP, DOWN, PAGE_UP, PAGE_DOWN, LEFT, RIGHT, HOME, END]


def feed(state, engine, *events):
	for event in events:
		state = reduce(state, event, engine)
	return state


def type_text(state, engine, text):
	return feed(state, engine, *(Insert(c) for c in text))


@pytest.fixture
def engine(apps, home):
	return Engine(apps, FakeUsage({"Terminal": 4.0, "Files": 1.0}), home=str(home))


@pytest.fixture
def many():
	apps = [app_candidate(f"Tool {i:02d}", f"tool{i}") for i in range(12)]
	return Engine(apps, FakeUsage())


def assert_consistent(state):
	assert 0 <= state.selected < max(1, state.result_count)
	assert state.scroll <= state.selected
	if state.height is not None:
		assert state.selected < state.scroll + state.height


class TestInitialState:
	def test_starts_with_recent_applications(self, engine):
		state = initial_state(engine)
		assert state.query == ""
		assert state.cursor == 0
		assert isinstance(state.mode, Applications)
		assert [r.candidate.name for r in state.items][:2] == ["Terminal", "Files"]
		assert (state.selected, state.scroll) == (0, 0)
		assert not state.done


class TestEditing:
	def test_typing_reranks(self, engine):
		state = type_text(initial_state(engine), engine, "fire")
		assert state.query == "fire"
		assert state.cursor == 4
		assert [r.candidate.name for r in state.items] == ["Firefox"]

	def test_insert_at_cursor(self, engine):
		state = type_text(initial_state(engine), engine, "frefox")
		state = feed(state, engine, HOME, RIGHT)
		state = reduce(state, Insert("i"), engine)
		assert (state.query, state.cursor) == ("firefox", 2)

	def test_backspace_and_delete(self, engine):
		state = type_text(initial_state(engine), engine, "firex")
		state = feed(state, engine, BACKSPACE)
		assert (state.query, state.cursor) == ("fire", 4)
		state = feed(state, engine, HOME, DELETE)
		assert (state.query, state.cursor) == ("ire", 0)

	def test_backspace_at_start_and_delete_at_end_are_noops(self, engine):
		state = type_text(initial_state(engine), engine, "fi")
		assert reduce(state, DELETE, engine) is state
		start = reduce(state, HOME, engine)
		assert reduce(start, BACKSPACE, engine) is start

	def test_unicode_is_character_indexed(self, engine):
		state = type_text(initial_state(engine), engine, "çé")
		state = feed(state, engine, LEFT, BACKSPACE)
		assert (state.query, state.cursor) == ("é", 0)

	def test_edit_resets_selection(self, engine):
		state = feed(initial_state(engine), engine, DOWN, DOWN)
		assert state.selected == 2
		state = reduce(state, Insert("e"), engine)
		assert (state.selected, state.scroll) == (0, 0)

	def test_cursor_moves_do_not_rerank(self, engine):
		state = type_text(initial_state(engine), engine, "te")
		for event in (LEFT, LEFT, LEFT, RIGHT, HOME, END, RIGHT):
			moved = reduce(state, event, engine)
			assert moved.mode is state.mode
			state = moved
		assert state.cursor == 2

	def test_cursor_is_clamped(self, engine):
		state = type_text(initial_state(engine), engine, "ab")
		assert feed(state, engine, RIGHT, RIGHT).cursor == 2
		assert feed(state, engine, LEFT, LEFT, LEFT, LEFT).cursor == 0


class TestModeSwitch:
	def test_path_query_switches_to_paths(self, engine, home):
		state = type_text(initial_state(engine), engine, "~/D")
		assert isinstance(state.mode, Paths)
		assert [c.display for c in state.items] == ["~/Documents", "~/Downloads"]

	def test_leaving_path_shape_returns_to_applications(self, engine):
		state = type_text(initial_state(engine), engine, "/")
		assert isinstance(state.mode, Paths)
		state = reduce(state, BACKSPACE, engine)
		assert isinstance(state.mode, Applications)
		assert state.result_count == len(engine.apps)

	def test_accept_descends_into_directory(self, engine, home):
		state = type_text(initial_state(engine), engine, "~/Doc")
		state = reduce(state, ACCEPT, engine)
		assert state.query == "~/Documents/"
		assert state.cursor == len("~/Documents/")
		assert [(c.display, c.is_dir) for c in state.items] == [("~/Documents/notes", True), ("~/Documents/run.sh", False)]
		assert (state.selected, state.scroll) == (0, 0)

	def test_confirm_on_directory_descends(self, engine):
		state = type_text(initial_state(engine), engine, "~/Doc")
		state = reduce(state, CONFIRM, engine)
		assert state.query == "~/Documents/"
		assert not state.done

	def test_accept_in_applications_is_noop(self, engine):
		state = type_text(initial_state(engine), engine, "fire")
		assert reduce(state, ACCEPT, engine) is state


class TestNavigation:
	def test_selection_is_clamped(self, engine):
		state = initial_state(engine)
		assert reduce(state, UP, engine).selected == 0
		state = feed(state, engine, *([DOWN] * 20))
		assert state.selected == state.result_count - 1

	def test_empty_results_keep_zero(self, engine):
		state = type_text(initial_state(engine), engine, "zzzz")
		assert state.result_count == 0
		state = feed(state, engine, DOWN, PAGE_DOWN, UP)
		assert (state.selected, state.scroll) == (0, 0)
		assert state.selected_item is None

	def test_scroll_follows_selection(self, many):
		state = initial_state(many, height=3)
		state = feed(state, many, DOWN, DOWN)
		assert (state.selected, state.scroll) == (2, 0)
		state = reduce(state, DOWN, many)
		assert (state.selected, state.scroll) == (3, 1)
		state = feed(state, many, UP, UP, UP)
		assert (state.selected, state.scroll) == (0, 0)

	def test_paging(self, many):
		state = initial_state(many, height=5)
		state = reduce(state, PAGE_DOWN, many)
		assert (state.selected, state.scroll) == (5, 1)
		state = feed(state, many, PAGE_DOWN, PAGE_DOWN)
		assert (state.selected, state.scroll) == (11, 7)
		state = reduce(state, PAGE_UP, many)
		assert (state.selected, state.scroll) == (6, 6)
		assert [r.candidate.name for r in state.visible()] == [f"Tool {i:02d}" for i in range(6, 11)]

	def test_resize_reclamps_scroll(self, many):
		state = feed(initial_state(many, height=10), many, *([DOWN] * 9))
		assert (state.selected, state.scroll) == (9, 0)
		state = reduce(state, Resize(4), many)
		assert (state.selected, state.scroll) == (9, 6)
		assert reduce(state, Resize(0), many).height == 1

	@pytest.mark.parametrize("seed", range(8))
	def test_invariants_hold_for_random_sessions(self, engine, seed):
		rnd = random.Random(seed)
		alphabet = ["f", "i", "e", "t", "o", "/", "~", ".", " "]
		state = initial_state(engine, height=rnd.randint(1, 4))
		for _ in range(200):
			roll = rnd.random()
			if roll < 0.3:
				event = Insert(rnd.choice(alphabet))
			elif roll < 0.4:
				event = rnd.choice([BACKSPACE, DELETE])
			elif roll < 0.45:
				event = Resize(rnd.randint(1, 5))
			elif roll < 0.5:
				event = ACCEPT
			else:
				event = rnd.choice(NAVIGATION)

			state = reduce(state, event, engine)
			assert_consistent(state)
			assert 0 <= state.cursor <= len(state.query)


class TestTerminal:
	def test_confirm_application(self, engine):
		state = type_text(initial_state(engine), engine, "fire")
		state = reduce(state, CONFIRM, engine)
		assert state.done
		assert isinstance(state.outcome, Launch)
		assert state.outcome.target.candidate.name == "Firefox"
		assert state.outcome.key == "Firefox"

	def test_confirm_executable_path(self, engine, home):
		state = type_text(initial_state(engine), engine, "~/bin/d")
		state = reduce(state, CONFIRM, engine)
		assert state.outcome == Launch(PathCompletion(f"{home}/bin/deploy", "~/bin/deploy", False))
		assert state.outcome.key == path_key(f"{home}/bin/deploy")

	def test_confirm_with_nothing_selected(self, engine):
		state = type_text(initial_state(engine), engine, "zzzz")
		assert reduce(state, CONFIRM, engine) is state

	def test_cancel(self, engine):
		state = reduce(initial_state(engine), CANCEL, engine)
		assert state.outcome == CANCELLED
		assert reduce(state, Insert("x"), engine) is state
		assert reduce(state, CONFIRM, engine) is state
