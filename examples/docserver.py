"""
Documentation Server Example

Serves a directory of markdown documents, the way a project's `docs/`
folder would be previewed locally.

Features shown:
- Markdown files rendered as HTML pages
- `README.md` served in place of the directory listing
- Extra response headers on every response
- Directory URLs redirected to their slash form

Usage:
    python docserver.py [DIRECTORY]

Test with:
    http://localhost:4000/             # The README, if present
    http://localhost:4000/guide.md     # A rendered document
"""

import sys

from shelf import FileService, run
from shelf.utils.logging import info


class DocServer(FileService):
	"""A file service preconfigured for browsing documentation."""

	def __init__(self, root: str = "."):
		super().__init__(
			root,
			headers=[
				("Cache-Control", "no-store"),
				("X-Content-Type-Options", "nosniff"),
			],
			index=["README.md", "index.md"],
			redirectDirectories=True,
		)
		info("Documentation server initialized", Root=str(self.root))


if __name__ == "__main__":
	run(DocServer(sys.argv[1] if len(sys.argv) > 1 else "."))

# EOF
