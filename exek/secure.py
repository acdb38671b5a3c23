import os
from functools import partial

USER_UID = os.getuid()


def _verify_access_impl(path: str, flags: int, mode: int | None = None, st_mode_mask: int = 0o177) -> int:
	fd = os.open(path, flags, *([] if mode is None else [mode]))
	st = os.fstat(fd)
	if st.st_uid != USER_UID or (st.st_mode & st_mode_mask):
		os.close(fd)
		b_path = os.path.basename(path)
		t_mode = f"{0o777 - st_mode_mask:#o}"[2:]
		msg = f"SECURITY VIOLATION: '{path}' has incorrect ownership or permissions\
\n(UID {st.st_uid} mode {st.st_mode & 0o777:#o}, expected UID {USER_UID} mode 0o{t_mode})\
, Do `chown $USER {b_path}` and `chmod {t_mode} {b_path}` in parent dir."
		raise PermissionError(msg)

	return fd


# Private files: configuration.
verify_dir_access = partial(_verify_access_impl, flags=os.O_RDONLY | os.O_DIRECTORY, st_mode_mask=0o077)
verify_file_access = partial(_verify_access_impl, flags=os.O_RDONLY | os.O_NOFOLLOW)

# Shared-readable files: the usage store only needs to be safe from other writers.
verify_store_dir = partial(_verify_access_impl, flags=os.O_RDONLY | os.O_DIRECTORY, st_mode_mask=0o022)
verify_store_file = partial(_verify_access_impl, flags=os.O_RDONLY | os.O_NOFOLLOW, st_mode_mask=0o022)
verify_file_write = partial(
	_verify_access_impl, flags=os.O_WRONLY | os.O_CREAT | os.O_TRUNC | os.O_NOFOLLOW, mode=0o600
)


def ensure_dir(path: str) -> None:
	"""Create `path` privately if missing, otherwise verify nobody else can write to it."""
	try:
		fd = verify_store_dir(path)
	except FileNotFoundError:
		os.makedirs(path, mode=0o700)
	else:
		os.close(fd)
