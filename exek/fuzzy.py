"""
Subsequence fuzzy scorer in the skim/fzf "v2" family.

A Smith-Waterman style alignment of the query against the text where every
query character must match, in order. Matches earn points, gaps cost points,
and characters that start a word, follow a delimiter or continue a run of
matches earn bonuses. A text the query is not a subsequence of scores 0.
"""

from functools import lru_cache

SCORE_MATCH = 16
SCORE_GAP_START = -3
SCORE_GAP_EXTENSION = -1
BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_NON_WORD = SCORE_MATCH // 2
BONUS_CAMEL123 = BONUS_BOUNDARY - 1
BONUS_CONSECUTIVE = -(SCORE_GAP_START + SCORE_GAP_EXTENSION)
BONUS_FIRST_CHAR_MULTIPLIER = 2

CACHE_SIZE = 16384
DELIMITERS = frozenset("/,:;|")

# Character classes, ordered so that anything above C_NON_WORD is a word char.
C_WHITE, C_NON_WORD, C_DELIMITER, C_LOWER, C_UPPER, C_LETTER, C_NUMBER = range(7)
_NEG = -(1 << 30)


def char_class(c: str) -> int:
	if c.isspace():
		return C_WHITE
	if c in DELIMITERS:
		return C_DELIMITER
	if c.isdigit():
		return C_NUMBER
	if c.islower():
		return C_LOWER
	if c.isupper():
		return C_UPPER
	if c.isalpha():
		return C_LETTER
	return C_NON_WORD


def bonus_for(prev: int, cls: int) -> int:
	if cls > C_DELIMITER:
		if prev in (C_WHITE, C_DELIMITER, C_NON_WORD):
			return BONUS_BOUNDARY
		if (prev == C_LOWER and cls == C_UPPER) or (prev != C_NUMBER and cls == C_NUMBER):
			return BONUS_CAMEL123
		return 0

	return BONUS_NON_WORD if cls != C_WHITE else BONUS_BOUNDARY


def _is_subsequence(text: list[str], query: list[str]) -> bool:
	it = iter(text)
	return all(q in it for q in query)


@lru_cache(maxsize=CACHE_SIZE)
def fuzzy_score(text: str, query: str) -> int:
	"""Score `query` against `text`; 0 means no match."""
	if not query or not text:
		return 0

	if any(c.isupper() for c in query):
		t, q = list(text), list(query)
	else:
		t, q = [c.lower() for c in text], list(query)

	if not _is_subsequence(t, q):
		return 0

	bonus = []
	prev = C_WHITE
	for c in text:
		cls = char_class(c)
		bonus.append(bonus_for(prev, cls))
		prev = cls

	m = len(t)
	# row[j]: best score with the current query char matched exactly at t[j]
	# chunk[j]: bonus of the first char of the consecutive run ending at t[j]
	row = [_NEG] * m
	chunk = [0] * m
	for j, c in enumerate(t):
		if c == q[0]:
			row[j] = SCORE_MATCH + bonus[j] * BONUS_FIRST_CHAR_MULTIPLIER
			chunk[j] = bonus[j]

	for qc in q[1:]:
		cur = [_NEG] * m
		cur_chunk = [0] * m
		gap = _NEG
		for j in range(1, m):
			if j >= 2:
				gap = max(gap + SCORE_GAP_EXTENSION, row[j - 2] + SCORE_GAP_START)

			if t[j] != qc:
				continue

			best, best_chunk = _NEG, 0
			if row[j - 1] > _NEG:
				b = max(chunk[j - 1], BONUS_CONSECUTIVE, bonus[j])
				best = row[j - 1] + SCORE_MATCH + b
				best_chunk = bonus[j] if bonus[j] >= BONUS_BOUNDARY else chunk[j - 1]

			if gap > _NEG // 2 and (g := gap + SCORE_MATCH + bonus[j]) > best:
				best, best_chunk = g, bonus[j]

			cur[j], cur_chunk[j] = best, best_chunk

		row, chunk = cur, cur_chunk

	return max(0, max(row))
