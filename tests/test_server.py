import asyncio
import socket
from pathlib import Path

import pytest

from conftest import NOTES, request
from shelf.http.model import (
	HTTPBodyFile,
	HTTPBodyWriter,
	HTTPRequest,
	HTTPResponse,
)
from shelf.server import AIOSocketServer, Processor, ServerOptions
from shelf.service import FileService


async def exchange(app: Processor, data: bytes, *, halfClose: bool = False) -> bytes:
	"""Runs a connection handler on one end of a socket pair, sends `data`
	from the other end and returns everything received until the handler
	closes the connection."""
	loop = asyncio.get_running_loop()
	server, client = socket.socketpair()
	server.setblocking(False)
	client.setblocking(False)
	task = loop.create_task(
		AIOSocketServer.OnRequest(
			app,
			server,
			loop=loop,
			options=ServerOptions(logRequests=False, keepalive=5.0),
		)
	)
	try:
		await loop.sock_sendall(client, data)
		if halfClose:
			client.shutdown(socket.SHUT_WR)
		chunks: list[bytes] = []
		while chunk := await asyncio.wait_for(loop.sock_recv(client, 65_536), 5.0):
			chunks.append(chunk)
		await asyncio.wait_for(task, 5.0)
	finally:
		client.close()
	return b"".join(chunks)


def serve(app: Processor, data: bytes, *, halfClose: bool = False) -> bytes:
	return asyncio.run(exchange(app, data, halfClose=halfClose))


def split(response: bytes) -> tuple[str, dict[str, str], bytes]:
	head, _, body = response.partition(b"\r\n\r\n")
	status, *lines = head.decode("latin-1").split("\r\n")
	headers = dict(_.split(": ", 1) for _ in lines)
	return status, headers, body


@pytest.fixture
def service(tree: Path) -> FileService:
	return FileService(tree)


def test_get_file(service: FileService) -> None:
	status, headers, body = split(
		serve(service, b"GET /notes.txt HTTP/1.1\r\nConnection: close\r\n\r\n")
	)
	assert status == "HTTP/1.1 200 OK"
	assert headers["Content-Type"] == "text/plain"
	assert headers["Content-Length"] == str(len(NOTES))
	assert headers["Connection"] == "close"
	assert body == NOTES


def test_head_has_no_body(service: FileService) -> None:
	status, headers, body = split(
		serve(service, b"HEAD /notes.txt HTTP/1.0\r\n\r\n")
	)
	assert status == "HTTP/1.0 200 OK"
	assert headers["Content-Length"] == str(len(NOTES))
	assert body == b""


def test_keep_alive_and_pipelining(service: FileService) -> None:
	data = serve(
		service,
		b"GET /notes.txt HTTP/1.1\r\n\r\n"
		b"GET /nope HTTP/1.1\r\n\r\n"
		b"GET /Sub/inner.txt HTTP/1.1\r\nConnection: close\r\n\r\n",
	)
	assert data.count(b"HTTP/1.1 ") == 3
	first, rest = data.split(NOTES, 1)
	assert first.startswith(b"HTTP/1.1 200 OK\r\n")
	assert rest.startswith(b"HTTP/1.1 404 Not Found\r\n")
	assert rest.endswith(b"\r\n\r\ninner")


def test_client_closing_ends_connection(service: FileService) -> None:
	data = serve(service, b"GET /notes.txt HTTP/1.1\r\n\r\n", halfClose=True)
	assert data.endswith(NOTES)


def test_bad_request(service: FileService) -> None:
	status, headers, body = split(serve(service, b"NOT HTTP\r\n\r\n"))
	assert status == "HTTP/1.1 400 Bad Request"
	assert headers["Connection"] == "close"
	assert body == b"Bad Request"


def test_invalid_content_length_is_a_bad_request(service: FileService) -> None:
	status, headers, _ = split(
		serve(service, b"GET /notes.txt HTTP/1.1\r\nContent-Length: -40\r\n\r\n")
	)
	assert status == "HTTP/1.1 400 Bad Request"
	assert headers["Connection"] == "close"


class FailingWriter(HTTPBodyWriter):
	"""Accepts the head, then fails while sending a file body."""

	def __init__(self, failure: BaseException):
		self.failure: BaseException = failure
		self.sent: list[bytes] = []

	async def _writeBytes(self, chunk: bytes) -> bool:
		self.sent.append(chunk)
		return True

	async def _writeFile(self, body: HTTPBodyFile, size: int = 64_000) -> bool:
		body.stream.read(4)
		raise self.failure


@pytest.mark.parametrize("failure", [BrokenPipeError(), ConnectionResetError()])
def test_file_is_released_when_client_goes_away(
	service: FileService, opened: list[HTTPBodyFile], failure: BaseException
) -> None:
	writer = FailingWriter(failure)
	res = asyncio.run(
		AIOSocketServer.SendResponse(request("GET", "/notes.txt"), service, writer)
	)
	assert res is None
	assert writer.sent[0].startswith(b"HTTP/1.1 200 OK\r\n")
	assert len(opened) == 1 and opened[0].closed


def test_file_is_released_when_cancelled(
	service: FileService, opened: list[HTTPBodyFile]
) -> None:
	writer = FailingWriter(asyncio.CancelledError())
	with pytest.raises(asyncio.CancelledError):
		asyncio.run(
			AIOSocketServer.SendResponse(request("GET", "/notes.txt"), service, writer)
		)
	assert len(opened) == 1 and opened[0].closed


def test_failing_processor_yields_server_error() -> None:
	class Failing:
		def process(self, request: HTTPRequest) -> HTTPResponse:
			raise RuntimeError("boom")

	data = serve(Failing(), b"GET / HTTP/1.1\r\n\r\n", halfClose=True)
	status, _, body = split(data)
	assert status == "HTTP/1.1 500 Internal Server Error"
	assert body == b"Internal Server Error"


# EOF
