import os
import subprocess
from collections.abc import Mapping, Sequence
from shlex import join as shlex_join, split as shlex_split
from shutil import which

from .candidates import AppCandidate, PathBased, PathCompletion, ScoredResult
from .desktop import launch_command
from .log import logger


def build_environment(extra_path: Sequence[str], base: Mapping[str, str] | None = None) -> dict[str, str]:
	env = dict(os.environ if base is None else base)
	parts = [p for p in env.get("PATH", "").split(":") if p]
	parts += [p for p in extra_path if p not in parts]
	env["PATH"] = ":".join(parts)
	env.setdefault("DISPLAY", ":0")
	if "XDG_RUNTIME_DIR" not in env:
		env["XDG_RUNTIME_DIR"] = f"/run/user/{os.getuid()}"

	env.setdefault("HOME", os.path.expanduser("~"))
	return env


def resolve_executable(token: str, path: str | None = None) -> str:
	if "/" in token:
		return os.path.expanduser(token)

	return which(token, path=path) or token


def resolve_command(app: AppCandidate, terminal: Sequence[str] = (), path: str | None = None) -> list[str]:
	match app.identity:
		case PathBased(file_path):
			argv = [file_path]
		case _:
			cmd = launch_command(app)
			try:
				argv = shlex_split(cmd)
			except ValueError:
				logger.debug(f"Unbalanced quoting in '{cmd}', splitting on whitespace")
				argv = cmd.split()

	if not argv:
		msg = f"Empty command for '{app.name}'"
		raise ValueError(msg)

	argv[0] = resolve_executable(argv[0], path)
	if app.terminal:
		if terminal:
			return [*terminal, "-e", shlex_join(argv)]

		logger.warning(f"No terminal emulator available for '{app.name}', launching directly")

	return argv


def spawn(cmd: list[str], env: Mapping[str, str] | None = None) -> bool:
	try:
		subprocess.Popen(
			cmd,
			stdout=subprocess.DEVNULL,
			stderr=subprocess.DEVNULL,
			stdin=subprocess.DEVNULL,
			start_new_session=True,
			env=env,
		)
		logger.info(f"Spawned process: {cmd}")
		return True
	except (OSError, subprocess.SubprocessError):
		logger.warning(f"Failed to spawn process {cmd}", exc_info=True)
		return False


def launch(
	target: ScoredResult | AppCandidate | PathCompletion,
	terminal: Sequence[str] = (),
	extra_path: Sequence[str] = (),
) -> bool:
	env = build_environment(extra_path)
	match target:
		case ScoredResult(candidate=app) | (AppCandidate() as app):
			try:
				cmd = resolve_command(app, terminal, env["PATH"])
			except ValueError:
				logger.warning(f"Cannot build a command for '{app.name}'")
				return False
		case PathCompletion(path=path):
			cmd = [path]
		case _:
			msg = f"cannot launch {target!r}"
			raise TypeError(msg)

	return spawn(cmd, env)
