from pathlib import Path
from typing import ClassVar, Iterable

from .builder import ResponseBuilder
from .errors import ConfigurationError, MethodNotAllowed, RenderError, ShelfError
from .http.model import HTTPRequest, HTTPResponse
from .resolver import (
	TargetDirectory,
	TargetFile,
	TargetMissing,
	decodePath,
	isWithin,
	resolve,
	resolveRoot,
)
from .utils.logging import debug, error, exception, warning


class FileService:
	"""Serves the files of a root directory: files are sent as-is, markdown
	is rendered as HTML and directories are listed.

	`process()` never raises, every failure is turned into an error
	response."""

	METHODS: ClassVar[tuple[str, ...]] = ("GET", "HEAD")

	def __init__(
		self,
		root: str | Path = ".",
		*,
		headers: Iterable[tuple[str, str]] = (),
		index: Iterable[str] = (),
		redirectDirectories: bool = False,
	):
		self.root: Path = resolveRoot(root)
		if not self.root.is_dir():
			raise ConfigurationError(f"Root is not an existing directory: {root}")
		self.builder: ResponseBuilder = ResponseBuilder(headers)
		self.index: tuple[str, ...] = tuple(index)
		self.redirectDirectories: bool = redirectDirectories

	def process(self, request: HTTPRequest) -> HTTPResponse:
		try:
			res = self.serve(request)
		except ShelfError as e:
			if e.status >= 500:
				exception(e, "Request failed")
			else:
				warning(
					"Request rejected",
					Status=e.status,
					Method=request.method,
					Detail=e.detail,
				)
			res = self.builder.error(request, e)
		except OSError as e:
			exception(e, "Filesystem error")
			res = self.builder.error(request, RenderError())
		except Exception as e:
			exception(e, "Unexpected error")
			error("Request failed", 500, Method=request.method)
			res = self.builder.error(request, ShelfError())
		if request.method == "HEAD":
			res.withoutBody()
		return res

	def serve(self, request: HTTPRequest) -> HTTPResponse:
		if request.method not in self.METHODS:
			raise MethodNotAllowed(request.method, self.METHODS)
		target = resolve(request.path, self.root)
		debug("Resolved", Path=request.path, Target=target.__class__.__name__)
		match target:
			case TargetFile():
				return self.builder.file(request, target)
			case TargetDirectory():
				return self.serveDirectory(request, target)
			case TargetMissing():
				return self.builder.missing(request)
			case _:
				raise RuntimeError(f"Unsupported target: {target}")

	def serveDirectory(
		self, request: HTTPRequest, target: TargetDirectory
	) -> HTTPResponse:
		if self.redirectDirectories and not request.path.endswith("/"):
			# Relative links in the page only work from the slash form
			location: str = f"{request.path}/"
			if request.query:
				location += f"?{request.queryString}"
			return self.builder.redirect(request, location)
		for name in self.index:
			index_path: Path = (target.path / name).resolve()
			if isWithin(index_path, self.root) and index_path.is_file():
				st = index_path.stat()
				return self.builder.file(
					request, TargetFile(index_path, st.st_size, st.st_mtime)
				)
		return self.builder.directory(request, target, decodePath(request.path))


# EOF
