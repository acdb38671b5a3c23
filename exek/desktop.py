"""Desktop entry discovery: `*.desktop` files into AppCandidate."""

import os
from collections.abc import Iterable
from configparser import ConfigParser, Error as ConfigError

from .candidates import AppCandidate, app_candidate, path_candidate
from .log import logger

SECTION = "Desktop Entry"
FIELD_CODES = ("%F", "%U", "%f", "%u", "%i", "%k")


def _flag(entry, key: str) -> bool:
	return entry.get(key, "false").strip().lower() == "true"


def parse_entry(path: str) -> AppCandidate | None:
	parser = ConfigParser(interpolation=None, strict=False, comment_prefixes=("#",), delimiters=("=",))
	parser.optionxform = str
	try:
		with open(path, encoding="utf-8", errors="replace") as f:
			parser.read_file(f, source=path)
	except (OSError, ConfigError, UnicodeError) as e:
		logger.debug(f"Skipping unreadable desktop entry '{path}': {e.__class__.__name__}")
		return None

	if not parser.has_section(SECTION):
		return None

	entry = parser[SECTION]
	if _flag(entry, "NoDisplay") or _flag(entry, "Hidden"):
		return None

	name, exec_line = entry.get("Name", "").strip(), entry.get("Exec", "").strip()
	if not name or not exec_line:
		return None

	return app_candidate(
		name,
		exec_line,
		entry.get("Comment", "").strip() or None,
		[c for c in entry.get("Categories", "").split(";") if c],
		_flag(entry, "Terminal"),
		icon=entry.get("Icon", "").strip() or None,
		source=path,
	)


def scan(dirs: Iterable[str]) -> list[AppCandidate]:
	"""Parse every desktop entry under `dirs`; later directories win on equal names."""
	dirs = list(dirs)
	apps: dict[str, AppCandidate] = {}
	for d in dirs:
		try:
			names = sorted(n for n in os.listdir(d) if n.endswith(".desktop"))
		except FileNotFoundError:
			continue
		except OSError as e:
			logger.warning(f"Cannot list desktop directory '{d}': {e.__class__.__name__}")
			continue

		for n in names:
			if app := parse_entry(os.path.join(d, n)):
				apps[app.name] = app

	logger.info(f"Scanned {len(apps)} applications from {len(dirs)} directories")
	return list(apps.values())


def from_paths(paths: Iterable[str]) -> list[AppCandidate]:
	"""Previously launched filesystem paths as PathBased candidates."""
	return [path_candidate(p) for p in paths if os.path.exists(p)]


def launch_command(app: AppCandidate) -> str:
	cmd = app.exec
	for code in FIELD_CODES:
		cmd = cmd.replace(code, "")

	return cmd.replace("%c", app.name).strip()
