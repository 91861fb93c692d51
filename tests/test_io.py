import pytest

from shelf.utils.io import LineParser

REQUEST: bytes = b"GET /notes.txt HTTP/1.1\r\nHost: 127.0.0.1\r\nConnection: close\r\n\r\n"


def feedAll(parser: LineParser, chunks: list[bytes]) -> list[bytes]:
	lines: list[bytes] = []
	for chunk in chunks:
		offset: int = 0
		while offset < len(chunk):
			line, read = parser.feed(chunk, offset)
			offset += read
			if line is not None:
				lines.append(line)
	return lines


def test_lines_across_chunks() -> None:
	lines = feedAll(
		LineParser(),
		[
			b"GET /notes.txt HTTP/1.1\r\nHost: 127.0.0.1\r\nConnection: close",
			b"\r\n\r",
			b"\n",
		],
	)
	assert lines == REQUEST.split(b"\r\n")[:-1]


@pytest.mark.parametrize("size", [1, 2, 3, 7])
def test_byte_by_byte(size: int) -> None:
	chunks = [REQUEST[i : i + size] for i in range(0, len(REQUEST), size)]
	assert feedAll(LineParser(), chunks) == REQUEST.split(b"\r\n")[:-1]


def test_incomplete_line_is_kept() -> None:
	parser = LineParser()
	assert parser.feed(b"partial") == (None, 7)
	line, read = parser.feed(b" line\r\nnext")
	assert line == b"partial line"
	assert read == 7


def test_reset_drops_buffer() -> None:
	parser = LineParser()
	parser.feed(b"garbage")
	parser.reset()
	assert parser.feed(b"GET\r\n") == (b"GET", 5)


# EOF
