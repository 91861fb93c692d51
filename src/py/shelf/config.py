from os import getenv
from typing import Iterable

from .errors import ConfigurationError

# Local development server: loopback only unless told otherwise
HOST: str = getenv("SHELF_HOST", "127.0.0.1")

PORT: int = int(getenv("SHELF_PORT", 4000))

ROOT: str = getenv("SHELF_ROOT", ".")

# Extra response headers, as `Name: value` pairs separated by `;`
HEADERS: list[str] = [
	_ for _ in getenv("SHELF_HEADERS", "").split(";") if _.strip()
]

# Index files served in place of a directory listing, separated by `,`
INDEX: list[str] = [
	_.strip() for _ in getenv("SHELF_INDEX", "").split(",") if _.strip()
]

REDIRECT_DIRECTORIES: bool = getenv("SHELF_REDIRECT_DIRECTORIES", "0") == "1"

LOG_REQUESTS: bool = getenv("SHELF_LOG_REQUESTS", "1") == "1"


def parseHeader(header: str) -> tuple[str, str]:
	"""Parses a `Name: value` pair."""
	name, sep, value = header.partition(":")
	name = name.strip()
	if not sep or not name or any(c in name for c in " \t\r\n"):
		raise ConfigurationError(f"Expected 'Name: value' header, got: {header!r}")
	value = value.strip()
	if "\r" in value or "\n" in value:
		raise ConfigurationError(f"Header value spans lines: {header!r}")
	return name, value


def parseHeaders(headers: Iterable[str] | None) -> list[tuple[str, str]]:
	return [parseHeader(_) for _ in headers or ()]


def parseAddress(address: str, port: int = PORT) -> tuple[str, int]:
	"""Parses `HOST:PORT`, `HOST` or `:PORT`."""
	host, sep, port_str = address.rpartition(":")
	if not sep:
		return address or HOST, port
	try:
		return host.strip("[]") or HOST, int(port_str)
	except ValueError as e:
		raise ConfigurationError(f"Invalid port in address: {address!r}") from e


# EOF
