import os
import posixpath
from pathlib import Path
from typing import NamedTuple
from urllib.parse import quote

from .errors import RenderError
from .render import renderPage
from .utils.htmpl import H, Node
from .utils.io import DEFAULT_ENCODING
from .utils.logging import warning


class DirectoryEntry(NamedTuple):
	name: str
	isDirectory: bool
	size: int | None = None

	@property
	def label(self) -> str:
		return f"{self.name}/" if self.isDirectory else self.name


def sortKey(entry: DirectoryEntry) -> tuple[bool, str, str]:
	"""Directories first, then case-insensitive by name. The exact name
	breaks ties so that the order is total."""
	return (not entry.isDirectory, entry.name.casefold(), entry.name)


def listEntries(path: Path) -> list[DirectoryEntry]:
	"""Lists the immediate children of the directory at `path`, in
	listing order."""
	entries: list[DirectoryEntry] = []
	try:
		with os.scandir(path) as it:
			for item in it:
				try:
					item.name.encode(DEFAULT_ENCODING)
				except UnicodeEncodeError:
					# Undecodable names come back with surrogate escapes, they
					# can be neither linked nor requested.
					warning(
						"Skipping entry with a non UTF-8 name", Name=repr(item.name)
					)
					continue
				try:
					is_dir = item.is_dir()
					size = None if is_dir else item.stat().st_size
				except OSError:
					# Typically a dangling symlink
					warning("Could not stat entry", Name=item.name)
					is_dir, size = False, None
				entries.append(DirectoryEntry(item.name, is_dir, size))
	except OSError as e:
		raise RenderError(f"Could not list directory: {path}") from e
	return sorted(entries, key=sortKey)


def formatSize(size: int | None) -> str:
	if size is None:
		return ""
	value: float = size
	for unit in ("B", "KB", "MB", "GB"):
		if value < 1024 or unit == "GB":
			return f"{size} B" if unit == "B" else f"{value:0.1f} {unit}"
		value /= 1024
	return f"{value:0.1f} GB"


def requestBase(requestPath: str) -> str:
	"""Normalizes the decoded request path as `/dir/sub` (no trailing
	slash), or an empty string for the root."""
	segments = [_ for _ in requestPath.split("/") if _ and _ != "."]
	return "/" + "/".join(segments) if segments else ""


def entryHref(base: str, entry: DirectoryEntry) -> str:
	href: str = f"{base}/{quote(entry.name, safe='')}"
	return f"{href}/" if entry.isDirectory else href


def parentHref(base: str) -> str:
	parent: str = posixpath.dirname(base)
	return "/".join(quote(_, safe="") for _ in parent.split("/")).rstrip("/") + "/"


def renderListing(path: Path, requestPath: str, isRoot: bool = False) -> str:
	"""Renders the HTML listing page of the directory at `path`, served at
	the (decoded) `requestPath`."""
	entries: list[DirectoryEntry] = listEntries(path)
	base: str = requestBase(requestPath)
	quoted_base: str = "/".join(quote(_, safe="") for _ in base.split("/"))
	items: list[Node] = []
	if not isRoot:
		items.append(H.li(H.a("..", href=parentHref(base), _="parent")))
	for entry in entries:
		items.append(
			H.li(
				H.a(
					entry.label,
					href=entryHref(quoted_base, entry),
					_="directory" if entry.isDirectory else "file",
				),
				(
					H.span(formatSize(entry.size), _="size")
					if entry.size is not None
					else None
				),
			)
		)
	title: str = f"{base}/"
	return renderPage(
		f"Index of {title}",
		H.h1("Index of ", H.code(title)),
		H.ul(items, _="listing"),
	)


# EOF
