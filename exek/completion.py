"""Filesystem completion for path-shaped queries."""

import os
import stat

from .candidates import PathCompletion
from .log import logger

PATH_PREFIXES = ("/", "./", "../", "~")


def is_path_query(query: str) -> bool:
	return query.startswith(PATH_PREFIXES)


def expand_tilde(query: str, home: str) -> str:
	if query == "~" or query.startswith("~/"):
		return home + query[1:]

	return query


def split_query(expanded: str) -> tuple[str, str]:
	"""Directory to list and the entry-name prefix to filter on."""
	if expanded.endswith("/"):
		return expanded, ""

	return os.path.dirname(expanded) or ".", os.path.basename(expanded)


def collapse_home(path: str, home: str) -> str:
	home = home.rstrip("/")
	if not home:
		return path
	if path == home:
		return "~/"
	if path.startswith(home + "/"):
		return "~/" + path[len(home) + 1 :]

	return path


def _entry_kind(entry: os.DirEntry) -> bool | None:
	"""True for a directory, False for an executable regular file, None otherwise."""
	try:
		st = entry.stat(follow_symlinks=True)
	except OSError:
		logger.debug(f"Stat error for {entry.path}")
		return None

	if stat.S_ISDIR(st.st_mode):
		return True
	if stat.S_ISREG(st.st_mode) and st.st_mode & 0o111:
		return False

	return None


def complete(query: str, home: str | None = None) -> list[PathCompletion]:
	"""Directories and executables matching the last segment of `query`; [] when nothing can be listed."""
	if not is_path_query(query):
		return []

	home = home or os.path.expanduser("~")
	dir_path, prefix = split_query(expand_tilde(query, home))
	tilde = query.startswith("~")
	completions = []
	try:
		with os.scandir(dir_path) as it:
			for entry in it:
				if not entry.name.startswith(prefix):
					continue

				if (is_dir := _entry_kind(entry)) is None:
					continue

				full = os.path.abspath(entry.path)
				display = collapse_home(full, home) if tilde else full
				completions.append(PathCompletion(full, display, is_dir))
	except OSError as e:
		logger.debug(f"Cannot list '{dir_path}' for query '{query}': {e.__class__.__name__}")
		return []

	completions.sort(key=lambda c: (not c.is_dir, c.display))
	return completions


def apply_completion(selected: PathCompletion) -> str:
	"""New query text after accepting `selected`; directories get exactly one trailing slash."""
	if selected.is_dir and not selected.display.endswith("/"):
		return selected.display + "/"

	return selected.display
