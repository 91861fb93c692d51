from typing import Iterator, Literal, TypeAlias

from ..utils.io import LineParser
from .model import (
	HTTPBodyBlob,
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPRequestLine,
	headername,
)

THTTPAtom: TypeAlias = HTTPRequestLine | HTTPHeaders | HTTPRequest | HTTPProcessingStatus


class MessageParser:
	"""Parses an HTTP request line."""

	__slots__ = ["line", "value", "skipping"]

	def __init__(self) -> None:
		self.line: LineParser = LineParser()
		self.value: HTTPRequestLine | HTTPProcessingStatus | None = None
		self.skipping: int = 0

	def flush(self) -> HTTPRequestLine | HTTPProcessingStatus | None:
		res = self.value
		self.reset()
		return res

	def reset(self) -> "MessageParser":
		self.line.reset()
		self.value = None
		self.skipping = 0
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bool | None, int]:
		n = len(chunk)
		available = n - start
		if self.skipping:
			read = min(available, self.skipping)
			self.skipping -= read
			return None, read
		elif available >= 5 and chunk[start] == 0x16:
			# A TLS handshake (browsers try it on plain ports), we skip the
			# record as we don't do TLS.
			size = 5 + (chunk[start + 3] << 8) + chunk[start + 4]
			if available >= size:
				return None, size
			else:
				self.skipping = size - available
				return None, available
		else:
			line, read = self.line.feed(chunk, start)
			if line is None:
				return None, read
			elif not line:
				# Stray empty lines before a request line are tolerated
				return None, read
			else:
				try:
					ln = line.decode("ascii")
				except UnicodeDecodeError:
					self.value = HTTPProcessingStatus.BadFormat
					return True, read
				parts = ln.split(" ")
				if len(parts) != 3 or not parts[0] or not parts[1]:
					self.value = HTTPProcessingStatus.BadFormat
				else:
					method, target, protocol = parts
					p: list[str] = target.split("?", 1)
					self.value = HTTPRequestLine(
						method, p[0], p[1] if len(p) > 1 else "", protocol
					)
				return True, read


class HeadersParser:
	__slots__ = ["headers", "contentType", "contentLength", "line", "malformed"]

	def __init__(self) -> None:
		self.line: LineParser = LineParser()
		self.headers: dict[str, str] = {}
		self.contentType: str | None = None
		self.contentLength: int | None = None
		# Set when a header makes the request unprocessable
		self.malformed: bool = False

	def flush(self) -> HTTPHeaders:
		res = HTTPHeaders(self.headers, self.contentType, self.contentLength)
		self.reset()
		return res

	def reset(self) -> "HeadersParser":
		self.line.reset()
		self.headers = {}
		self.contentType = None
		self.contentLength = None
		self.malformed = False
		return self

	def feed(
		self, chunk: bytes, start: int = 0
	) -> tuple[str | Literal[False] | None, int]:
		"""Feeds data from chunk, starting at `start` offset. Returns
		a value and the number of bytes read. When the value is `None`, no
		header has been extracted, when the value is `False` it's the empty
		line ending the headers, otherwise it is the name of the parsed
		header."""
		line, read = self.line.feed(chunk, start)
		if line is None:
			return None, read
		elif not line:
			return False, read
		else:
			# Header values are latin-1, names are ASCII
			ln: str = line.decode("latin-1")
			i = ln.find(":")
			if i == -1:
				return None, read
			h = ln[:i].lower().strip()
			v = ln[i + 1 :].strip()
			if h == "content-length":
				# A non-negative decimal, anything else is malformed
				if v.isascii() and v.isdigit():
					self.contentLength = int(v)
				else:
					self.malformed = True
			elif h == "content-type":
				self.contentType = v
			n: str = headername(h)
			self.headers[n] = v
			return n, read


class BodyLengthParser:
	"""Consumes the body of a request with a Content-Length, so that the
	next request on the connection starts at the right offset."""

	__slots__ = ["expected", "read", "data"]

	def __init__(self) -> None:
		self.expected: int = 0
		self.read: int = 0
		self.data: list[bytes] = []

	def flush(self) -> HTTPBodyBlob:
		res = HTTPBodyBlob(b"".join(self.data), self.read)
		self.reset()
		return res

	def reset(self, length: int = 0) -> "BodyLengthParser":
		self.expected = length
		self.read = 0
		self.data = []
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bool | None, int]:
		left: int = len(chunk) - start
		to_read: int = max(0, min(left, self.expected - self.read))
		self.data.append(chunk[start : start + to_read])
		self.read += to_read
		return (True if self.read >= self.expected else None), to_read


class HTTPParser:
	"""A stateful HTTP request parser, fed with chunks as they arrive from
	the socket and yielding atoms as they are recognized."""

	def __init__(self) -> None:
		self.message: MessageParser = MessageParser()
		self.headers: HeadersParser = HeadersParser()
		self.bodyLength: BodyLengthParser = BodyLengthParser()
		self.parser: MessageParser | HeadersParser | BodyLengthParser = self.message
		self.requestLine: HTTPRequestLine | None = None
		self.requestHeaders: HTTPHeaders | None = None

	def reset(self) -> "HTTPParser":
		self.parser = self.message.reset()
		self.headers.reset()
		self.requestLine = None
		self.requestHeaders = None
		return self

	def request(self, body: HTTPBodyBlob) -> HTTPRequest:
		line = self.requestLine
		assert line is not None
		return HTTPRequest(
			method=line.method,
			path=line.path,
			query=parseQuery(line.query),
			headers=self.requestHeaders or HTTPHeaders({}),
			protocol=line.protocol,
			body=body,
		)

	def feed(self, chunk: bytes) -> Iterator[THTTPAtom]:
		size: int = len(chunk)
		offset: int = 0
		while offset < size:
			# Sub-parsers keep their own buffers, so a partially consumed
			# chunk never needs to be fed again.
			value, read = self.parser.feed(chunk, offset)
			offset += read
			if value is None:
				continue
			elif self.parser is self.message:
				line = self.message.flush()
				if line is HTTPProcessingStatus.BadFormat:
					yield HTTPProcessingStatus.BadFormat
					self.reset()
				elif isinstance(line, HTTPRequestLine):
					self.requestLine = line
					self.requestHeaders = None
					yield line
					self.parser = self.headers
			elif self.parser is self.headers:
				if value is False and self.headers.malformed:
					yield HTTPProcessingStatus.BadFormat
					self.reset()
				elif value is False:
					headers = self.headers.flush()
					self.requestHeaders = headers
					yield headers
					if headers.contentLength:
						self.parser = self.bodyLength.reset(headers.contentLength)
						yield HTTPProcessingStatus.Body
					else:
						yield self.request(HTTPBodyBlob())
						yield HTTPProcessingStatus.Complete
						self.parser = self.message.reset()
			elif self.parser is self.bodyLength:
				yield self.request(self.bodyLength.flush())
				yield HTTPProcessingStatus.Complete
				self.parser = self.message.reset()
			else:
				raise RuntimeError(f"Unsupported parser: {self.parser}")


def parseQuery(text: str) -> dict[str, str]:
	res: dict[str, str] = {}
	if not text:
		return res
	for item in text.split("&"):
		kv = item.split("=", 1)
		if len(kv) == 1:
			res[item] = ""
		else:
			res[kv[0]] = kv[1]
	return res


# EOF
