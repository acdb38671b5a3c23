import logging
import os
from logging.handlers import SysLogHandler

from . import PROG_NAME

LOG_LVL = "INFO"
SYSLOG_SOCKETS = ("/dev/log", "/var/run/syslog")

# ========== SYSLOG LOGGING ==========
syslog_extension = (
	("EMERGENCY", 70, "emerg"),
	("ALERT", 60, "alert"),
	("NOTICE", 25, "notice"),
)

for level_name, level_value, _ in syslog_extension:
	setattr(logging, level_name, level_value)
	logging.addLevelName(level_value, level_name)
	setattr(
		logging.Logger,
		level_name.lower(),
		lambda self, msg, lvl=level_value, *args, **kws: (
			self._log(lvl, msg, args, **kws) if self.isEnabledFor(lvl) else None
		),
	)

logger = logging.getLogger(PROG_NAME)


def resolve_level(configured: str | None = None) -> int:
	name = os.getenv(f"{PROG_NAME.upper()}_LOG_LEVEL") or configured or LOG_LVL
	return getattr(logging, str(name).upper(), logging.INFO)


def setup_logging(level: str | None = None, fallback_dir: str | None = None) -> logging.Handler:
	"""Attach the syslog handler, or a file handler when no syslog socket exists."""
	logger.setLevel(resolve_level(level))
	fmt = logging.Formatter(f"{PROG_NAME}[%(process)d]: %(levelname)s - %(message)s")
	if addr := next((p for p in SYSLOG_SOCKETS if os.path.exists(p)), None):
		handler = SysLogHandler(address=addr)
		handler.priority_map.update({i[0]: i[2] for i in syslog_extension})
	else:
		if fallback_dir is None:
			msg = f"No syslog socket found. Tried: {list(SYSLOG_SOCKETS)}"
			raise RuntimeError(msg)

		os.makedirs(fallback_dir, mode=0o700, exist_ok=True)
		handler = logging.FileHandler(os.path.join(fallback_dir, f"{PROG_NAME}.log"), encoding="utf-8")
		fmt = logging.Formatter(f"%(asctime)s {PROG_NAME}[%(process)d]: %(levelname)s - %(message)s")

	handler.setFormatter(fmt)
	logger.addHandler(handler)
	logger.propagate = False
	return handler
