from pathlib import Path

import markdown
from markdown.extensions import Extension

from .errors import RenderError
from .utils.htmpl import H, Node, html, raw
from .utils.io import DEFAULT_ENCODING

PAGE_CSS: str = """
:root {
	font-family: sans-serif;
	font-size: 15px;
	line-height: 1.45em;
	background: #F8F8F8;
	color: #202020;
}
body {
	max-width: 860px;
	margin: 0 auto;
	padding: 20px;
}
h1 {
	margin-top: 1.25em;
	margin-bottom: 1.25em;
	line-height: 1.25em;
}
h2 {
	margin-top: 1.25em;
}
pre {
	padding: 12px;
	overflow-x: auto;
	background: #EEEEEE;
}
code {
	font-family: monospace;
}
table {
	border-collapse: collapse;
}
th, td {
	padding: 4px 10px;
	border: 1px solid #D0D0D0;
}
ul.listing {
	padding: 0px;
	list-style: none;
}
ul.listing li {
	padding: 2px 0px;
}
ul.listing .size {
	color: #808080;
	margin-left: 1em;
}
"""

class EscapeHTML(Extension):
	"""Renders raw HTML found in markdown as text, so that documents can
	not inject markup or scripts in the page."""

	def extendMarkdown(self, md: markdown.Markdown) -> None:
		md.preprocessors.deregister("html_block")
		md.inlinePatterns.deregister("html")


# SEE: https://python-markdown.github.io/extensions/ and
# https://facelessuser.github.io/pymdown-extensions/
# `EscapeHTML` comes last, after the extensions that register HTML handling.
MARKDOWN_EXTENSIONS: list[str | Extension] = [
	"extra",
	"toc",
	"sane_lists",
	"pymdownx.tilde",
	"pymdownx.magiclink",
	EscapeHTML(),
]


def renderPage(title: str, *body: Node) -> str:
	"""Renders a complete HTML document with the shared page template."""
	return html(
		H.html(
			H.head(
				H.meta(charset="utf-8"),
				H.meta(
					name="viewport",
					content="width=device-width, initial-scale=1.0",
				),
				H.title(title),
				H.style(raw(PAGE_CSS)),
			),
			H.body(*body),
		)
	)


def renderMarkdownText(text: str, title: str = "") -> str:
	# A fresh converter per call, as `Markdown` instances hold state
	body: str = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS).convert(text)
	return renderPage(title, H.main(raw(body)))


def renderMarkdown(path: Path) -> str:
	"""Reads and renders the markdown file at `path` as an HTML document
	titled with the file name. Invalid UTF-8 is replaced rather than
	rejected, only a failure to read the file raises a `RenderError`."""
	try:
		source: bytes = path.read_bytes()
	except OSError as e:
		raise RenderError(f"Could not read markdown file: {path}") from e
	return renderMarkdownText(
		source.decode(DEFAULT_ENCODING, errors="replace"), title=path.name
	)


# EOF
