"""Frecency ledger: launch counts and timestamps per item key."""

import json
import os
import re
from bisect import bisect_right
from collections.abc import Callable
from datetime import datetime, timezone
from typing import NamedTuple

from .log import logger
from .secure import ensure_dir, verify_file_write, verify_store_file

PATH_PREFIX = "path:"

# Recency multiplier steps over whole days since the last launch.
_DAYS_TH = [1, 7, 30, 90]
_DAYS_MR = [2.0, 1.5, 1.0, 0.5, 0.25]

_FRACTION = re.compile(r"\.(\d+)")


class StoreError(RuntimeError):
	pass


class UsageRecord(NamedTuple):
	launch_count: int = 0
	last_launched: datetime | None = None


ZERO_RECORD = UsageRecord()


def path_key(path: str) -> str:
	return f"{PATH_PREFIX}{path}"


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


def recency_multiplier(days: int) -> float:
	return _DAYS_MR[bisect_right(_DAYS_TH, days)]


def format_timestamp(ts: datetime) -> str:
	return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
	text = text.strip()
	if text.endswith(("Z", "z")):
		text = text[:-1] + "+00:00"

	# fromisoformat only takes up to microseconds before 3.11
	text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
	ts = datetime.fromisoformat(text)
	return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts


def _decode_record(key: object, value: object) -> UsageRecord:
	match value:
		case {"launch_count": int(count), "last_launched": None} if isinstance(key, str) and count >= 0:
			return UsageRecord(count, None)
		case {"launch_count": int(count), "last_launched": str(ts)} if isinstance(key, str) and count >= 0:
			return UsageRecord(count, parse_timestamp(ts))
		case {"launch_count": int(count)} if isinstance(key, str) and count >= 0 and "last_launched" not in value:
			return UsageRecord(count, None)

	msg = f"invalid usage record for {key!r}: {value!r}"
	raise ValueError(msg)


class UsageStore:
	"""Flat key -> UsageRecord mapping persisted as JSON after every mutation."""

	def __init__(
		self, path: str, usage: dict[str, UsageRecord] | None = None, clock: Callable[[], datetime] = utcnow
	) -> None:
		self.path = path
		self._usage = dict(usage or {})
		self._clock = clock

	@classmethod
	def load(cls, path: str, clock: Callable[[], datetime] = utcnow) -> "UsageStore":
		try:
			fd = verify_store_file(path)
		except FileNotFoundError:
			logger.info(f"No usage store at '{path}', starting with empty history")
			return cls(path, clock=clock)
		except OSError as e:
			msg = f"Cannot open usage store '{path}': {e}"
			raise StoreError(msg) from e

		try:
			with os.fdopen(fd, "rb") as f:
				raw = json.loads(f.read())

			entries = raw["usage"] if isinstance(raw, dict) else None
			if not isinstance(entries, dict):
				msg = "top-level 'usage' mapping missing"
				raise ValueError(msg)

			usage = {k: _decode_record(k, v) for k, v in entries.items()}
		except (OSError, ValueError, KeyError) as e:
			msg = f"Usage store '{path}' is corrupted: {e}"
			raise StoreError(msg) from e

		logger.info(f"Usage store loaded from '{path}' with {len(usage)} entries")
		return cls(path, usage, clock=clock)

	def __len__(self) -> int:
		return len(self._usage)

	def __contains__(self, key: str) -> bool:
		return key in self._usage

	def usage(self, key: str) -> UsageRecord:
		return self._usage.get(key, ZERO_RECORD)

	def frecency(self, key: str, now: datetime | None = None) -> float:
		count, last = self.usage(key)
		if last is None:
			return 0.0

		days = ((now or self._clock()) - last).days
		return count * recency_multiplier(days)

	def frequent_paths(self) -> list[tuple[str, UsageRecord]]:
		return [(k.removeprefix(PATH_PREFIX), v) for k, v in self._usage.items() if k.startswith(PATH_PREFIX)]

	def record(self, key: str) -> UsageRecord:
		"""Count one launch of `key` and persist; StoreError if the write fails."""
		count, _ = self.usage(key)
		rec = self._usage[key] = UsageRecord(count + 1, self._clock())
		logger.debug(f"Recorded launch of '{key}' (count={rec.launch_count})")
		self.save()
		return rec

	def record_path(self, path: str) -> UsageRecord:
		return self.record(path_key(os.path.abspath(path)))

	def save(self) -> None:
		serializable = {
			"usage": {
				k: {
					"launch_count": v.launch_count,
					"last_launched": None if v.last_launched is None else format_timestamp(v.last_launched),
				}
				for k, v in self._usage.items()
			}
		}
		store_dir = os.path.dirname(os.path.abspath(self.path))
		tmp_path = os.path.join(store_dir, f".{os.path.basename(self.path)}.tmp")
		try:
			ensure_dir(store_dir)
			fd = verify_file_write(tmp_path)
			with os.fdopen(fd, "wb") as f:
				f.write(json.dumps(serializable, ensure_ascii=False, indent=2).encode("utf-8"))
				f.flush()
				os.fsync(f.fileno())

			os.replace(tmp_path, self.path)
			dir_fd = os.open(store_dir, os.O_RDONLY | os.O_DIRECTORY)
			try:
				os.fsync(dir_fd)
			finally:
				os.close(dir_fd)
		except OSError as e:
			logger.exception(f"Usage store save failed to '{self.path}'")
			msg = f"Cannot write usage store '{self.path}': {e}"
			raise StoreError(msg) from e

		logger.info(f"Usage store saved with {len(self._usage)} entries")
