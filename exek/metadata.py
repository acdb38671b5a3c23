"""Subtext for path rows: content type, size and age."""

import os
from bisect import bisect_right
from functools import lru_cache
from sys import intern
from time import time
from gi.repository import Gio, GLib  # type: ignore[missing-module-attribute]

from .log import logger

CACHE_MED = 2048
TYPE_FILE = intern("FILE")
TYPE_FOLDER = intern("FOLDER")
TYPE_OCTET = intern("OCTET-STREAM")

_TIME_TH = [60, 3600, 86400, 604800, 2629746, 31556952]
_TIME_UN = ["minute", "hour", "day", "week", "month", "year"]
_SIZE_TH = [1, 1024, 1048576, 1073741824, 1099511627776]
_SIZE_UN = ["B", "KiB", "MiB", "GiB", "TiB"]

MAGICMIME = False
try:
	from magic import from_file as magic_from_file

	MAGICMIME = True
except ModuleNotFoundError:
	pass


# ========== HELPER FUNCTIONS - FORMATTING ==========
def human_readable_size(size: int) -> str:
	if size == 0:
		return "0 B"

	idx = bisect_right(_SIZE_TH, size) - 1
	return f"{size / _SIZE_TH[idx]:.1f} {_SIZE_UN[idx]}"


def human_readable_time(mtime: float | None, now: float) -> str:
	if mtime is None:
		return ""

	if (d := max(0, now - mtime)) < 60:
		return "Just now"

	idx = bisect_right(_TIME_TH, d) - 1
	return f"{(v := d / _TIME_TH[idx]):.1f} {_TIME_UN[idx]}{'s' * (v >= 2)} ago"


# ========== HELPER FUNCTIONS - CONTENT TYPES (cached) ==========
@lru_cache(maxsize=CACHE_MED)
def cached_magic_mime(path: str) -> str:
	try:
		return intern(magic_from_file(path, mime=True))
	except (OSError, ValueError):
		logger.debug(f"Magic MIME detection failed for {path}")
		return TYPE_FILE


@lru_cache(maxsize=CACHE_MED)
def content_type_for(filename: str) -> str:
	try:
		guessed, _ = Gio.content_type_guess(filename, None)
		if guessed == "application/octet-stream":
			_, ext = os.path.splitext(filename)
			return intern(ext[1:].upper() or TYPE_OCTET)

		return intern(guessed)
	except (GLib.GError, TypeError, AttributeError):
		logger.debug(f"Content type detection error for {filename}")
		return TYPE_FILE


def subtext(path: str, is_dir: bool, now: float | None = None) -> str:
	now = time() if now is None else now
	try:
		st = os.stat(path)
	except OSError:
		return TYPE_FOLDER if is_dir else TYPE_FILE

	age = human_readable_time(st.st_mtime, now)
	if is_dir:
		return f"{TYPE_FOLDER} • {age}"

	type_str = content_type_for(os.path.basename(path))
	if type_str == TYPE_OCTET and MAGICMIME:
		type_str = cached_magic_mime(path)

	parts = [type_str.split("/")[-1].upper(), human_readable_size(st.st_size), age]
	return " • ".join(filter(None, parts))
