import re
from pathlib import Path

import pytest

from shelf.errors import RenderError
from shelf.render import renderMarkdown, renderMarkdownText, renderPage
from shelf.utils.htmpl import H


def test_heading_and_emphasis() -> None:
	html = renderMarkdownText("# Title\n\nHello **world**")
	assert re.search(r"<h1[^>]*>Title</h1>", html)
	assert "<strong>world</strong>" in html


def test_document_structure() -> None:
	html = renderMarkdownText("text", title="doc.md")
	assert html.startswith("<!DOCTYPE html>\n<html>")
	assert "<title>doc.md</title>" in html
	assert '<meta charset="utf-8">' in html
	assert html.endswith("</html>")


def test_block_and_inline_rules() -> None:
	html = renderMarkdownText(
		"\n".join(
			[
				"## Lists",
				"",
				"- one",
				"- two",
				"",
				"1. first",
				"2. second",
				"",
				"```",
				"code <here>",
				"```",
				"",
				"| a | b |",
				"|---|---|",
				"| 1 | 2 |",
				"",
				"A [link](http://example.com) and *emphasis*.",
			]
		)
	)
	assert "<ul>" in html and "<li>one</li>" in html
	assert "<ol>" in html and "<li>first</li>" in html
	assert "<pre><code>code &lt;here&gt;" in html
	assert "<table>" in html and "<td>1</td>" in html
	assert '<a href="http://example.com">link</a>' in html
	assert "<em>emphasis</em>" in html


@pytest.mark.parametrize(
	"source",
	["**unclosed", "[link](", "```\nnever closed", "| a |\n|-", "<div>", "# \n#"],
)
def test_malformed_markdown_degrades(source: str) -> None:
	assert "</html>" in renderMarkdownText(source)


def test_raw_html_is_escaped() -> None:
	html = renderMarkdownText(
		"<script>alert(1)</script>\n\nSome <b onclick=\"x()\">inline</b> markup"
	)
	assert "<script>" not in html
	assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
	assert "<b onclick" not in html


def test_strikethrough_and_autolink() -> None:
	html = renderMarkdownText("~~gone~~ see https://example.org")
	assert "<del>gone</del>" in html
	assert 'href="https://example.org"' in html


def test_render_file(tmp_path: Path) -> None:
	path = tmp_path / "README.md"
	path.write_text("# Title\n\nHello **world**")
	html = renderMarkdown(path)
	assert "<title>README.md</title>" in html
	assert "<strong>world</strong>" in html


def test_invalid_utf8_is_replaced(tmp_path: Path) -> None:
	path = tmp_path / "broken.md"
	path.write_bytes(b"# Caf\xe9\n")
	assert "Caf�" in renderMarkdown(path)


def test_unreadable_file_is_a_render_error(tmp_path: Path) -> None:
	with pytest.raises(RenderError):
		renderMarkdown(tmp_path / "missing.md")


def test_page_title_is_escaped() -> None:
	html = renderPage("<b>&", H.p("x"))
	assert "<title>&lt;b&gt;&amp;</title>" in html


# EOF
