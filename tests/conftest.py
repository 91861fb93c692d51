from pathlib import Path

import pytest

from shelf.http.model import HTTPBodyFile, HTTPRequest, HTTPResponse

NOTES: bytes = b"0123456789"
README: str = "# Title\n\nHello **world**\n"


@pytest.fixture
def tree(tmp_path: Path) -> Path:
	"""A served root, next to an `outside` directory it must never leak."""
	root = tmp_path / "root"
	root.mkdir()
	(root / "notes.txt").write_bytes(NOTES)
	(root / "README.md").write_text(README)
	(root / "index.md").write_text("# Welcome\n")
	(root / "with space.txt").write_text("spaced")
	(root / "image.PNG").write_bytes(b"\x89PNG\r\n\x1a\n")
	(root / "Sub").mkdir()
	(root / "Sub" / "inner.txt").write_text("inner")
	outside = tmp_path / "outside"
	outside.mkdir()
	(outside / "secret.txt").write_text("secret")
	(root / "escape").symlink_to(outside, target_is_directory=True)
	(root / "leak.txt").symlink_to(outside / "secret.txt")
	(root / "alias.txt").symlink_to(root / "notes.txt")
	return root


@pytest.fixture
def opened(monkeypatch: pytest.MonkeyPatch) -> list[HTTPBodyFile]:
	"""Records every file body opened while the test runs."""
	bodies: list[HTTPBodyFile] = []
	original = HTTPBodyFile.Open

	def recordingOpen(path: Path) -> HTTPBodyFile:
		body = original(path)
		bodies.append(body)
		return body

	monkeypatch.setattr(HTTPBodyFile, "Open", staticmethod(recordingOpen))
	return bodies


def request(method: str, path: str, **headers: str) -> HTTPRequest:
	target, _, query = path.partition("?")
	return HTTPRequest(
		method,
		target,
		query=dict(_.split("=", 1) for _ in query.split("&")) if query else None,
		headers={k.replace("_", "-"): v for k, v in headers.items()},
	)


def payload(response: HTTPResponse) -> bytes:
	"""Reads the whole body of the response, and closes it."""
	body = response.body
	try:
		if body is None:
			return b""
		elif isinstance(body, HTTPBodyFile):
			return body.stream.read()
		else:
			return body.payload
	finally:
		response.close()


# EOF
