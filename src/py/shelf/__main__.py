import argparse
import sys

from . import config
from .errors import ConfigurationError
from .server import run
from .service import FileService
from .utils.logging import error, info

VERSION: str = "0.8.1"


def main(args: list[str] | None = None) -> int:
	parser = argparse.ArgumentParser(
		prog="shelf",
		description="A basic HTTP file server, for learning and local development",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument(
		"-a",
		"--addr",
		action="store",
		dest="addr",
		metavar="HOST:PORT",
		help="The address to listen on",
		default=f"{config.HOST}:{config.PORT}",
	)
	parser.add_argument(
		"-p",
		"--port",
		action="store",
		dest="port",
		type=int,
		help="Overrides the port of the address",
		default=None,
	)
	parser.add_argument(
		"-H",
		"--header",
		action="append",
		dest="headers",
		metavar="'NAME: VALUE'",
		help="Extra header added to every response (can be repeated)",
	)
	parser.add_argument(
		"-i",
		"--index",
		action="append",
		dest="index",
		metavar="NAME",
		help="File served instead of the directory listing when present, such as index.html (can be repeated)",
	)
	parser.add_argument(
		"-r",
		"--redirect-directories",
		action="store_true",
		dest="redirectDirectories",
		default=config.REDIRECT_DIRECTORIES,
		help="Redirects directory URLs without a trailing slash",
	)
	parser.add_argument(
		"-q",
		"--quiet",
		action="store_false",
		dest="logRequests",
		default=config.LOG_REQUESTS,
		help="Does not log requests",
	)
	parser.add_argument(
		"root",
		metavar="ROOT",
		nargs="?",
		default=config.ROOT,
		help="The root directory for serving files",
	)
	options = parser.parse_args(args=args)

	try:
		host, port = config.parseAddress(options.addr)
		headers = config.parseHeaders(options.headers or config.HEADERS)
		service = FileService(
			options.root,
			headers=headers,
			index=options.index or config.INDEX,
			redirectDirectories=options.redirectDirectories,
		)
	except ConfigurationError as e:
		error(e.detail or e.message, "CONFIG")
		return 1

	info(f"shelf {VERSION}")
	info("Serving directory", Root=str(service.root))
	info("Options", Headers=len(headers), Index=",".join(service.index) or None)
	run(
		service,
		host=host,
		port=options.port or port,
		logRequests=options.logRequests,
	)
	return 0


if __name__ == "__main__":
	sys.exit(main(sys.argv[1:]))

# EOF
