import asyncio
import socket
import threading
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple, Protocol

from .config import HOST, LOG_REQUESTS, PORT
from .http.model import (
	HTTPBodyFile,
	HTTPBodyWriter,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPResponse,
)
from .http.parser import HTTPParser
from .utils.logging import debug, error, event, exception, info, warning


class Processor(Protocol):
	"""Anything that turns a request into a response, without raising."""

	def process(self, request: HTTPRequest) -> HTTPResponse: ...


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	host: str = HOST
	port: int = PORT
	backlog: int = 1_000
	# Polling timeout for accepting new connections, so that the stop
	# state is checked regularly.
	polling: float = 1.0
	readsize: int = 4_096
	# Idle time after which a keep-alive connection is closed
	keepalive: float = 30.0
	logRequests: bool = LOG_REQUESTS
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


SERVER_BAD_REQUEST: bytes = (
	b"HTTP/1.1 400 Bad Request\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 11\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Bad Request"
)

SERVER_ERROR: bytes = (
	b"HTTP/1.1 500 Internal Server Error\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 21\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Internal Server Error"
)


class AIOSocketBodyWriter(HTTPBodyWriter):
	"""Specialized body writer to work with AIO sockets."""

	def __init__(
		self,
		client: "socket.socket",
		loop: asyncio.AbstractEventLoop,
	) -> None:
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop

	async def _writeBytes(self, chunk: bytes) -> bool:
		if chunk:
			await self.loop.sock_sendall(self.client, chunk)
		return True

	async def _writeFile(self, body: HTTPBodyFile, size: int = 64_000) -> bool:
		# Falls back to read/send when `sendfile` is not available
		await self.loop.sock_sendfile(
			self.client, body.stream, count=body.length or None
		)
		return True


class AIOSocketServer:
	"""AsyncIO backend using sockets directly, one task per connection."""

	@classmethod
	async def OnRequest(
		cls,
		app: Processor,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Processes the requests of a client connection until it closes,
		times out or asks to close."""
		size: int = options.readsize
		buffer = bytearray(size)
		keep_alive: bool = True
		status: HTTPProcessingStatus = HTTPProcessingStatus.Processing
		req_count: int = 0
		res_count: int = 0
		try:
			parser: HTTPParser = HTTPParser()
			writer: AIOSocketBodyWriter = AIOSocketBodyWriter(client, loop)
			while keep_alive:
				try:
					n = await asyncio.wait_for(
						loop.sock_recv_into(client, buffer),
						timeout=options.keepalive,
					)
				except TimeoutError:
					status = HTTPProcessingStatus.Timeout
					break
				if not n:
					# No data means the client closed the connection
					status = HTTPProcessingStatus.NoData
					break
				# NOTE: With HTTP pipelining, a single read may contain more
				# than one request.
				for atom in parser.feed(bytes(buffer[:n])):
					if atom is HTTPProcessingStatus.BadFormat:
						warning("Malformed request", Client=f"{id(client):x}")
						await writer.write(SERVER_BAD_REQUEST)
						keep_alive = False
						break
					elif isinstance(atom, HTTPRequest):
						req: HTTPRequest = atom
						req_count += 1
						if options.logRequests:
							event(req.method, req.path)
						if (
							req.protocol == "HTTP/1.0"
							or (req.header("Connection") or "").lower() == "close"
						):
							keep_alive = False
						if await cls.SendResponse(
							req, app, writer, close=not keep_alive
						):
							res_count += 1
						else:
							keep_alive = False
							break
			if status is HTTPProcessingStatus.Timeout and req_count != res_count:
				warning("Client timed out", Requests=req_count, Responses=res_count)
			debug(
				"Connection closed",
				Client=f"{id(client):x}",
				Status=status.name,
				Requests=req_count,
			)
		except (BrokenPipeError, ConnectionResetError):
			debug("Client went away", Client=f"{id(client):x}")
		except Exception as e:
			exception(e)
		finally:
			client.close()

	@staticmethod
	async def SendResponse(
		request: HTTPRequest,
		app: Processor,
		writer: HTTPBodyWriter,
		*,
		close: bool = False,
	) -> HTTPResponse | None:
		"""Processes the request and sends the response with the given
		writer. The response is always closed, which releases any file
		it holds, including when the task is cancelled or the client
		disconnects."""
		res: HTTPResponse | None = None
		sent: bool = False
		try:
			res = app.process(request)
			if close:
				res.setHeader("Connection", "close")
			await writer.write(res.head())
			sent = True
			await writer.write(res.body)
			return res
		except (BrokenPipeError, ConnectionResetError):
			debug("Client closed early", Method=request.method, Path=request.path)
			return None
		except Exception as e:
			exception(e)
			if not sent:
				error(
					"Response not sent", 500, Method=request.method, Path=request.path
				)
				await writer.write(SERVER_ERROR)
			return None
		finally:
			if res is not None:
				res.close()

	@classmethod
	async def Serve(
		cls,
		app: Processor,
		options: ServerOptions = ServerOptions(),
	) -> None:
		"""Main server coroutine."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		port: int = options.port
		try:
			server.bind((options.host, port))
		except OSError as e:
			warning(f"Could not bind to {options.host}:{port}, trying other ports.")
			bound: bool = False
			for p in range(options.port + 1, options.port + 5):
				try:
					server.bind((options.host, p))
					bound = True
					port = p
					info(f"Found alternate available port: {port}")
					break
				except OSError:
					continue
			if not bound:
				server.close()
				error(
					f"Unable to bind to {options.host}:{options.port}, aborting.",
					"HOSTPORTERR",
				)
				raise e

		server.listen(options.backlog)
		server.setblocking(False)

		tasks: set[asyncio.Task[None]] = set()
		loop = asyncio.get_running_loop()

		state = ServerState()
		# Signal handlers can only be set from the main thread
		if (
			options.stopSignals
			and threading.current_thread() is threading.main_thread()
		):
			loop.add_signal_handler(SIGINT, state.stop)
			loop.add_signal_handler(SIGTERM, state.stop)
		loop.set_exception_handler(state.onException)

		info(
			"Shelf server listening",
			icon="🚀",
			URL=f"http://{options.host}:{port}",
		)

		try:
			while state.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling or 1.0
					)
				except TimeoutError:
					continue
				except OSError as e:
					# [Errno 24] Too many open files
					if e.errno == 24:
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				client.setblocking(False)
				task = loop.create_task(
					cls.OnRequest(app, client, loop=loop, options=options)
				)
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


def run(
	app: Processor,
	*,
	host: str = HOST,
	port: int = PORT,
	logRequests: bool = LOG_REQUESTS,
	condition: Callable[[], bool] | None = None,
) -> None:
	"""High level function to run the server until interrupted."""
	options = ServerOptions(
		host=host, port=port, logRequests=logRequests, condition=condition
	)
	try:
		asyncio.run(AIOSocketServer.Serve(app, options))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
