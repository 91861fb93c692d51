from pathlib import Path

import pytest

from shelf.content import ContentDecision, classify, extension


@pytest.mark.parametrize(
	"name, contentType",
	[
		("index.html", "text/html"),
		("page.HTM", "text/html"),
		("logo.png", "image/png"),
		("photo.JPEG", "image/jpeg"),
		("style.css", "text/css"),
		("app.js", "text/javascript"),
		("data.json", "application/json"),
		("notes.txt", "text/plain"),
		("icon.svg", "image/svg+xml"),
		("archive.tar.gz", "application/gzip"),
		("font.woff2", "font/woff2"),
	],
)
def test_known_extensions(name: str, contentType: str) -> None:
	assert classify(name) == ContentDecision(contentType, False)


@pytest.mark.parametrize("name", ["data.bin", "blob", "weird.xyz123", "trailing."])
def test_unknown_falls_back_to_octet_stream(name: str) -> None:
	assert classify(name) == ContentDecision("application/octet-stream", False)


@pytest.mark.parametrize("name", ["README.md", "notes.MD", "doc.markdown"])
def test_markdown_is_flagged(name: str) -> None:
	decision = classify(name)
	assert decision.isMarkdown
	assert decision.contentType == "text/markdown"


@pytest.mark.parametrize(
	"name", ["main.py", "lib.rs", "Cargo.toml", "LICENSE", "Makefile", ".gitignore"]
)
def test_source_files_are_text(name: str) -> None:
	assert classify(name) == ContentDecision("text/plain", False)


def test_only_the_name_matters() -> None:
	assert classify(Path("/some/dir.png/file.txt")) == classify("file.txt")


def test_extension() -> None:
	assert extension("a/b/c.TXT") == "txt"
	assert extension(".gitignore") == ""
	assert extension("archive.tar.gz") == "gz"
	assert extension("noext") == ""


# EOF
