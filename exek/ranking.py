from collections.abc import Iterable
from typing import NamedTuple, Protocol

from .candidates import AppCandidate, ScoredResult, exec_base
from .fuzzy import fuzzy_score

RECENT_LIMIT = 20
NAME_BOOST = 10
FRECENCY_CAP = 100.0
FRECENCY_DAMPING = 10


class FrecencySource(Protocol):
	def frecency(self, key: str) -> float: ...


class FieldScores(NamedTuple):
	name: int
	exec: int
	description: int
	category: int

	@property
	def base(self) -> int:
		return max(self.name, self.exec, self.description // 2, self.category // 3)


def field_scores(query: str, app: AppCandidate) -> FieldScores:
	return FieldScores(
		fuzzy_score(app.name, query),
		fuzzy_score(exec_base(app.exec), query),
		fuzzy_score(app.description, query) if app.description else 0,
		max((fuzzy_score(c, query) for c in app.categories), default=0),
	)


def final_score(scores: FieldScores, frecency: float) -> int:
	base = scores.base
	boost = NAME_BOOST if scores.name == base else 0
	return base + boost + int(min(frecency, FRECENCY_CAP)) // FRECENCY_DAMPING


def recent(candidates: Iterable[AppCandidate], usage: FrecencySource, limit: int = RECENT_LIMIT) -> list[ScoredResult]:
	"""Most frequently/recently used candidates, for the empty query."""
	results = []
	for app in candidates:
		f = usage.frecency(app.key)
		results.append(ScoredResult(app, int(f), f))

	results.sort(key=lambda r: (-r.frecency, r.candidate.name))
	return results[:limit]


def rank(
	query: str, candidates: Iterable[AppCandidate], usage: FrecencySource, limit: int = RECENT_LIMIT
) -> list[ScoredResult]:
	"""Order candidates by fuzzy relevance blended with frecency. Reads usage, never records it."""
	if not query:
		return recent(candidates, usage, limit)

	results = []
	for app in candidates:
		scores = field_scores(query, app)
		if scores.base <= 0:
			continue

		f = usage.frecency(app.key)
		results.append(ScoredResult(app, final_score(scores, f), f))

	results.sort(key=lambda r: (-r.relevance, -r.frecency, r.candidate.name))
	return results
