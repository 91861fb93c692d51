from typing import Iterable

from .content import classify
from .errors import MethodNotAllowed, RenderError, ShelfError
from .http.model import HTTPBodyFile, HTTPRequest, HTTPResponse
from .listing import renderListing
from .render import renderMarkdown
from .resolver import TargetDirectory, TargetFile


class ResponseBuilder:
	"""Turns resolved targets and errors into responses, adding the
	operator's extra headers to each of them."""

	def __init__(self, headers: Iterable[tuple[str, str]] = ()):
		self.headers: list[tuple[str, str]] = list(headers)

	def withHeaders(self, response: HTTPResponse) -> HTTPResponse:
		for name, value in self.headers:
			# The framing headers are never overridden
			if name.lower() not in ("content-length", "content-type"):
				response.setHeader(name, value)
		return response

	def file(self, request: HTTPRequest, target: TargetFile) -> HTTPResponse:
		decision = classify(target.path)
		if decision.isMarkdown:
			return self.html(request, renderMarkdown(target.path))
		try:
			body = HTTPBodyFile.Open(target.path)
		except OSError as e:
			raise RenderError(f"Could not open file: {target.path}") from e
		return self.withHeaders(
			request.respondFile(body, contentType=decision.contentType)
		)

	def directory(
		self, request: HTTPRequest, target: TargetDirectory, requestPath: str
	) -> HTTPResponse:
		return self.html(
			request, renderListing(target.path, requestPath, isRoot=target.isRoot)
		)

	def html(self, request: HTTPRequest, html: str) -> HTTPResponse:
		return self.withHeaders(request.respondHTML(html))

	def redirect(self, request: HTTPRequest, location: str) -> HTTPResponse:
		return self.withHeaders(request.redirect(location))

	def missing(self, request: HTTPRequest) -> HTTPResponse:
		return self.withHeaders(request.notFound())

	def error(self, request: HTTPRequest, error: ShelfError) -> HTTPResponse:
		"""Responds with the error's public message only, as its detail may
		reference local paths."""
		res = request.error(error.status, error.message)
		if isinstance(error, MethodNotAllowed):
			res.setHeader("Allow", ", ".join(error.allowed))
		return self.withHeaders(res)


# EOF
