from pathlib import PurePath
from typing import NamedTuple

# Lower-cased extension, without the dot, to media type
MIME_TYPES: dict[str, str] = {
	# Documents
	"html": "text/html",
	"htm": "text/html",
	"xhtml": "application/xhtml+xml",
	"css": "text/css",
	"js": "text/javascript",
	"mjs": "text/javascript",
	"json": "application/json",
	"map": "application/json",
	"webmanifest": "application/manifest+json",
	"xml": "application/xml",
	"txt": "text/plain",
	"text": "text/plain",
	"log": "text/plain",
	"csv": "text/csv",
	"tsv": "text/tab-separated-values",
	"md": "text/markdown",
	"markdown": "text/markdown",
	"pdf": "application/pdf",
	"rtf": "application/rtf",
	"wasm": "application/wasm",
	# Images
	"png": "image/png",
	"jpg": "image/jpeg",
	"jpeg": "image/jpeg",
	"gif": "image/gif",
	"svg": "image/svg+xml",
	"ico": "image/vnd.microsoft.icon",
	"webp": "image/webp",
	"avif": "image/avif",
	"bmp": "image/bmp",
	"tif": "image/tiff",
	"tiff": "image/tiff",
	# Fonts
	"woff": "font/woff",
	"woff2": "font/woff2",
	"ttf": "font/ttf",
	"otf": "font/otf",
	# Audio & video
	"mp3": "audio/mpeg",
	"ogg": "audio/ogg",
	"wav": "audio/wav",
	"flac": "audio/flac",
	"mp4": "video/mp4",
	"webm": "video/webm",
	"ogv": "video/ogg",
	"mov": "video/quicktime",
	# Archives
	"zip": "application/zip",
	"gz": "application/gzip",
	"tgz": "application/gzip",
	"bz2": "application/x-bzip2",
	"xz": "application/x-xz",
	"tar": "application/x-tar",
	"7z": "application/x-7z-compressed",
}

# Source and configuration files, served as text so that browsers display
# them instead of offering a download.
TEXT_EXTENSIONS: frozenset[str] = frozenset(
	"""\
c cc cpp cxx h hpp java kt go rs py pyi rb pl php lua sh bash zsh fish ps1
toml yml yaml ini cfg conf mk cmake proto rst tex fst sql diff patch\
""".split()
)

TEXT_FILES: frozenset[str] = frozenset(
	"""\
.gitattributes .gitignore .mailmap .editorconfig AUTHORS CODE_OF_CONDUCT
CONTRIBUTING COPYING COPYRIGHT Cargo.lock LICENSE LICENSE-APACHE LICENSE-MIT
Makefile Dockerfile README rust-toolchain\
""".split()
)

MARKDOWN_EXTENSIONS: frozenset[str] = frozenset(("md", "markdown"))

DEFAULT_TYPE: str = "application/octet-stream"
TEXT_TYPE: str = "text/plain"


class ContentDecision(NamedTuple):
	contentType: str
	isMarkdown: bool = False


def extension(path: PurePath | str) -> str:
	"""Returns the lower-cased last extension of the path, without the dot."""
	name: str = PurePath(path).name
	i = name.rfind(".")
	return name[i + 1 :].lower() if i > 0 else ""


def classify(path: PurePath | str) -> ContentDecision:
	"""Decides how a file is served based on its name only. This is total:
	unknown files are served as `application/octet-stream`."""
	name: str = PurePath(path).name
	ext: str = extension(name)
	if ext in MARKDOWN_EXTENSIONS:
		return ContentDecision(MIME_TYPES[ext], True)
	elif ext in MIME_TYPES:
		return ContentDecision(MIME_TYPES[ext])
	elif ext in TEXT_EXTENSIONS or name in TEXT_FILES:
		return ContentDecision(TEXT_TYPE)
	else:
		return ContentDecision(DEFAULT_TYPE)


# EOF
