import os
import re
import stat
from pathlib import Path
from typing import NamedTuple, TypeAlias
from urllib.parse import unquote_to_bytes

from .errors import ForbiddenPath, MalformedPath
from .utils.logging import debug

# -----------------------------------------------------------------------------
#
# RESOLVED TARGETS
#
# -----------------------------------------------------------------------------


class TargetFile(NamedTuple):
	path: Path
	size: int
	modified: float | None = None


class TargetDirectory(NamedTuple):
	path: Path
	isRoot: bool = False


class TargetMissing(NamedTuple):
	pass


TResolvedTarget: TypeAlias = TargetFile | TargetDirectory | TargetMissing

RE_SEPARATOR = re.compile(r"[/\\]")
# NUL, C0 controls, DEL and C1 controls
RE_CONTROL = re.compile(r"[\x00-\x1f\x7f-\x9f]")

# -----------------------------------------------------------------------------
#
# RESOLUTION
#
# -----------------------------------------------------------------------------


def decodePath(path: str) -> str:
	"""Strips the query and fragment from the raw request path and returns
	its percent-decoded form, which always starts with `/`."""
	path = path.split("?", 1)[0].split("#", 1)[0]
	if not path:
		return "/"
	elif not path.startswith("/"):
		raise MalformedPath(f"Request path is not absolute: {path!r}")
	try:
		return unquote_to_bytes(path).decode("utf8")
	except UnicodeDecodeError as e:
		raise MalformedPath(f"Request path is not UTF-8: {path!r}") from e


def validatePath(path: str) -> list[str]:
	"""Validates the decoded path and returns its non-empty segments."""
	if RE_CONTROL.search(path):
		raise ForbiddenPath(f"Control character in path: {path!r}")
	segments = [_ for _ in RE_SEPARATOR.split(path) if _ and _ != "."]
	if ".." in segments:
		raise ForbiddenPath(f"Parent segment in path: {path!r}")
	return segments


def isWithin(path: Path, root: Path) -> bool:
	return path.parts[: len(parts := root.parts)] == parts


def resolve(path: str, root: Path) -> TResolvedTarget:
	"""Resolves the raw (percent-encoded) request `path` against the
	canonical `root` directory.

	The order of operations matters: the path is decoded, validated, joined,
	canonicalized (following symlinks) and only then checked to be within the
	root. Raises `MalformedPath` or `ForbiddenPath`, and lets other `OSError`
	through."""
	decoded: str = decodePath(path)
	segments: list[str] = validatePath(decoded)
	local_path: Path = root.joinpath(*segments).resolve()
	if not isWithin(local_path, root):
		raise ForbiddenPath(f"Path escapes root: {path!r}")
	try:
		st = local_path.stat()
	except (FileNotFoundError, NotADirectoryError):
		debug("Path not found", Path=decoded)
		return TargetMissing()
	if stat.S_ISDIR(st.st_mode):
		return TargetDirectory(local_path, isRoot=local_path == root)
	elif decoded.endswith("/"):
		# A file is not a directory
		return TargetMissing()
	else:
		return TargetFile(local_path, st.st_size, st.st_mtime)


def resolveRoot(root: str | Path) -> Path:
	"""Returns the canonical form of the server root."""
	return Path(os.path.expanduser(root)).resolve()


# EOF
