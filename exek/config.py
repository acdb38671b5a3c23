import os
from collections.abc import Callable
from functools import singledispatch
from shlex import split as shlex_split
from shutil import which
from typing import Any
from gi.repository import GLib  # type: ignore[missing-module-attribute]

from . import PROG_NAME
from .log import logger
from .secure import verify_dir_access, verify_file_access

try:
	import tomllib
except ModuleNotFoundError:
	import tomli as tomllib

# ========== CONFIGURATION AND PATHS ==========
CONFIG_FILE = os.path.join(GLib.get_user_config_dir(), PROG_NAME, "config.toml")
STORE_FILE = os.path.join(GLib.get_user_config_dir(), PROG_NAME, "database.json")
CACHE_DIR = os.path.join(GLib.get_user_cache_dir(), PROG_NAME)

TERMINALS = ("x-terminal-emulator", "gnome-terminal", "konsole", "xterm", "alacritty", "kitty")
EXTRA_PATH = (
	"/usr/local/sbin",
	"/usr/local/bin",
	"/usr/sbin",
	"/usr/bin",
	"/sbin",
	"/bin",
	"/usr/games",
	"/usr/local/games",
	"/snap/bin",
)


def default_desktop_dirs() -> list[str]:
	data_dirs = [GLib.get_user_data_dir(), *GLib.get_system_data_dirs()]
	dirs = [os.path.join(d, "applications") for d in data_dirs]
	dirs += [
		"/var/lib/flatpak/exports/share/applications",
		os.path.join(GLib.get_user_data_dir(), "flatpak", "exports", "share", "applications"),
	]
	return list(dict.fromkeys(dirs))


# ========== HELPER FUNCTIONS - CONFIGURATION ==========
def read_config(path: str) -> dict[str, Any]:
	try:
		os.close(verify_dir_access(os.path.dirname(path)))
		fd = verify_file_access(path)
		with os.fdopen(fd, "rb") as f:
			data = tomllib.load(f)

		logger.info(f"Configuration loaded successfully from '{path}'")
		logger.debug(f"Config keys: {list(data.keys())}")
		return {**data, **data.get("settings", {})}
	except FileNotFoundError:
		logger.info(f"Config file not found at '{path}', using defaults")
		return {}
	except PermissionError:
		logger.exception(f"Permission error loading config from '{path}'")
		return {}
	except tomllib.TOMLDecodeError:
		logger.exception(f"Invalid TOML syntax in '{path}'")
		return {}
	except (OSError, ValueError):
		logger.exception(f"Failed to load config from '{path}'")
		return {}


def get_config_value(cfg: dict, key: str, default: Any, type_fn: Callable = str) -> Any:
	"""Extracts and validates configuration values."""
	try:
		value = type_fn(cfg.get(key, default))
		if value != default:
			logger.debug(f"Config override: {key} = {value}")

		return value
	except (TypeError, ValueError) as e:
		logger.warning(f"Invalid config value for '{key}': {cfg.get(key)}, using default: {default} ({e})")
		return default


def create_normalizer(h: Callable[[str], list]) -> Callable[[Any], list]:
	normalizer = singledispatch(lambda _: [])
	normalizer.register(list, list)
	normalizer.register(str, h)
	return normalizer


normalize_shlex = create_normalizer(shlex_split)
normalize_list = create_normalizer(lambda v: [v])


def parse_bool(value: Any) -> bool:
	if isinstance(value, str):
		if value.strip().lower() in ("1", "true", "yes", "on"):
			return True
		if value.strip().lower() in ("0", "false", "no", "off"):
			return False

		msg = f"not a boolean: {value!r}"
		raise ValueError(msg)

	return bool(value)


def _find_command(*candidates: str | list[str]) -> list[str] | None:
	for cmd in candidates:
		cmdx = normalize_list(cmd)
		if found := which(cmdx[0]):
			logger.debug(f"Found command '{cmd}' at: {found}")
			cmdx[0] = found
			return cmdx

	logger.debug(f"None of these commands found: {candidates}")
	return None


def get_command_list(cfg: dict, key: str, default: list) -> list:
	"""Obtains list of commands from config or searches for binaries."""
	val = cfg.get(key)
	if val is None:
		if found := _find_command(*default):
			logger.debug(f"Using detected command for '{key}': {found}")
			return found

		logger.warning(f"No command found for '{key}' (tried: {default})")
		return []

	result = normalize_shlex(val)
	logger.debug(f"Using configured command for '{key}': {result}")
	return result


# ========== SETTINGS ==========
class Settings:
	"""Resolved launcher settings."""

	def __init__(self, cfg: dict[str, Any]) -> None:
		self.cfg = cfg
		self.log_level = get_config_value(cfg, "log_level", "INFO")
		self.recent_limit = max(1, get_config_value(cfg, "recent_limit", 20, int))
		self.store_file = os.path.expanduser(get_config_value(cfg, "store_file", STORE_FILE))
		self.show_paths = get_config_value(cfg, "show_paths", True, parse_bool)
		self.desktop_dirs = [os.path.expanduser(d) for d in normalize_list(cfg.get("desktop_dirs"))]
		if not self.desktop_dirs:
			self.desktop_dirs = default_desktop_dirs()

		self.extra_path = normalize_list(cfg.get("extra_path")) or list(EXTRA_PATH)
		self.terminal = get_command_list(cfg, "terminal", list(TERMINALS))
		logger.debug(
			f"Settings - recent_limit: {self.recent_limit}, store: {self.store_file}, "
			f"desktop_dirs: {self.desktop_dirs}, terminal: {self.terminal or 'none'}"
		)


def load_settings(path: str = CONFIG_FILE) -> Settings:
	return Settings(read_config(path))
