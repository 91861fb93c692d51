from typing import ClassVar

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------
# Each error carries the HTTP status it maps to, and a public message that is
# safe to send back to the client. The detail passed to the constructor is
# only ever logged, as it may contain local filesystem paths.


class ShelfError(Exception):
	STATUS: ClassVar[int] = 500
	MESSAGE: ClassVar[str] = "Internal Server Error"

	def __init__(self, detail: str | None = None):
		super().__init__(detail or self.MESSAGE)
		self.detail: str | None = detail

	@property
	def status(self) -> int:
		return self.STATUS

	@property
	def message(self) -> str:
		return self.MESSAGE


class MalformedPath(ShelfError):
	"""The request path is not absolute or does not decode to UTF-8."""

	STATUS = 400
	MESSAGE = "Bad Request: malformed path"


class ForbiddenPath(ShelfError):
	"""The request path tries to escape the server root."""

	STATUS = 403
	MESSAGE = "Forbidden"


class MethodNotAllowed(ShelfError):
	STATUS = 405
	MESSAGE = "Method Not Allowed"

	def __init__(self, method: str, allowed: tuple[str, ...] = ("GET", "HEAD")):
		super().__init__(f"Unsupported method: {method}")
		self.method: str = method
		self.allowed: tuple[str, ...] = allowed


class RenderError(ShelfError):
	"""A file or directory could not be read while rendering it."""

	STATUS = 500
	MESSAGE = "Internal Server Error"


class ConfigurationError(ShelfError):
	"""Invalid startup configuration, never sent to a client."""


# EOF
