from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from .status import HTTP_STATUS

T = TypeVar("T")

# --
# == Response API
#
# The shapes of response a file server sends, defined on top of a single
# `respond()` primitive so that requests (or test doubles) only implement
# that one.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	def respondText(
		self, text: str, status: int = 200, *, message: str | None = None
	) -> T:
		return self.respond(
			content=text, contentType="text/plain", status=status, message=message
		)

	def respondHTML(self, html: str, status: int = 200) -> T:
		return self.respond(content=html, contentType="text/html", status=status)

	# NOTE: No ranges, ETags or conditional requests
	def respondFile(self, body: Any, contentType: str) -> T:
		"""Responds with an opened file body, its length being the
		Content-Length."""
		return self.respond(content=body, contentType=contentType)

	def error(self, status: int, content: str | None = None) -> T:
		"""A plain text error, with the status reason as the default body."""
		message: str = HTTP_STATUS.get(status, "Server Error")
		return self.respondText(
			message if content is None else content, status, message=message
		)

	def notFound(self, content: str = "Not Found") -> T:
		return self.error(404, content)

	def redirect(self, location: str) -> T:
		# SEE: https://developer.mozilla.org/en-US/docs/Web/HTTP/Redirections
		return self.respond(
			contentLength=0,
			status=302,
			headers={"Location": location},
		)


# EOF
