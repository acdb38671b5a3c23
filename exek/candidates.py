import os
from typing import NamedTuple

from .usage import path_key


# ========== IDENTITIES ==========
class Named(NamedTuple):
	name: str

	@property
	def key(self) -> str:
		return self.name


class PathBased(NamedTuple):
	path: str

	@property
	def key(self) -> str:
		return path_key(self.path)


Identity = Named | PathBased


# ========== CANDIDATES ==========
class AppCandidate(NamedTuple):
	name: str
	exec: str
	description: str | None = None
	categories: tuple[str, ...] = ()
	terminal: bool = False
	identity: Identity | None = None
	icon: str | None = None
	source: str | None = None

	@property
	def key(self) -> str:
		return (self.identity or Named(self.name)).key


class PathCompletion(NamedTuple):
	path: str
	display: str
	is_dir: bool


class ScoredResult(NamedTuple):
	candidate: AppCandidate
	relevance: int
	frecency: float


def exec_base(exec_line: str) -> str:
	"""Last path segment of the first whitespace-delimited token of a command line."""
	first = next(iter(exec_line.split()), "")
	return first.rsplit("/", 1)[-1]


def app_candidate(
	name: str,
	exec_line: str,
	description: str | None = None,
	categories: tuple[str, ...] | list[str] = (),
	terminal: bool = False,
	**kws,
) -> AppCandidate:
	return AppCandidate(name, exec_line, description, tuple(categories), terminal, Named(name), **kws)


def path_candidate(path: str) -> AppCandidate:
	path = os.path.abspath(path)
	return AppCandidate(
		f"{os.path.basename(path.rstrip('/')) or path} [Path]",
		path,
		path,
		("Path",),
		False,
		PathBased(path),
	)
