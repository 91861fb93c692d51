from pathlib import Path

import pytest

from conftest import NOTES, request
from shelf.http.model import HTTPBodyFile, HTTPResponse


def test_text_response() -> None:
	res = HTTPResponse.Create("café", contentType="text/plain", status=200)
	assert res.getHeader("Content-Length") == "5"
	assert res.head().startswith(b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n")
	assert res.head().endswith(b"\r\n\r\n")


def test_only_opened_files_are_bodies(tree: Path) -> None:
	with pytest.raises(ValueError):
		HTTPResponse.Create(tree / "notes.txt")  # type: ignore[arg-type]


def test_file_response(tree: Path) -> None:
	res = request("GET", "/notes.txt").respondFile(
		HTTPBodyFile.Open(tree / "notes.txt"), "text/plain"
	)
	assert res.getHeader("Content-Length") == str(len(NOTES))
	assert isinstance(res.body, HTTPBodyFile)
	body = res.body
	res.close()
	res.close()
	assert body.closed


def test_redirect() -> None:
	res = request("GET", "/Sub").redirect("/Sub/")
	assert res.status == 302
	assert res.getHeader("Location") == "/Sub/"
	assert res.getHeader("Content-Length") == "0"
	assert res.body is None


def test_without_body_keeps_headers(tree: Path) -> None:
	res = request("HEAD", "/notes.txt").respondFile(
		HTTPBodyFile.Open(tree / "notes.txt"), "text/plain"
	)
	body = res.body
	res.withoutBody()
	assert res.body is None
	assert isinstance(body, HTTPBodyFile) and body.closed
	assert res.getHeader("Content-Length") == str(len(NOTES))


# EOF
