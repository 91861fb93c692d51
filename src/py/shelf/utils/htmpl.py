from typing import Callable, Iterable, Iterator, LiteralString, Union, cast

from mypy_extensions import KwArg, VarArg

# --
# HTMPL builds HTML documents out of `Node` trees, so that generated pages
# never need string concatenation and text is always escaped.

HTML_VOID: set[str] = set(
	"area base br col embed hr img input link meta source track wbr".split()
)
HTML_ESCAPED = str.maketrans(
	{"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#x27;"}
)
HTML_QUOTED = str.maketrans({"&": "&amp;", '"': "&quot;", "<": "&lt;"})


def escape(text: str) -> str:
	return text.translate(HTML_ESCAPED)


def quoted(text: str | None) -> str:
	return text.translate(HTML_QUOTED) if text else ""


TNodeContent = Union["Node", str, int, float]
TAttributeContent = str | bool | int | float | None


class Node:
	__slots__ = ["name", "attributes", "children"]

	def __init__(
		self,
		name: str,
		children: Iterable[TNodeContent] | None = None,
		attributes: dict[str, TAttributeContent] | None = None,
	):
		self.name: str = name
		self.attributes: dict[str, TAttributeContent] = attributes or {}
		self.children: list[TNodeContent] = list(children) if children else []

	def iterHTML(self) -> Iterator[str]:
		if self.name == "#raw":
			yield str(self.attributes.get("#value") or "")
		elif self.name == "#text":
			yield escape(str(self.attributes.get("#value") or ""))
		else:
			yield f"<{self.name}"
			for k, v in self.attributes.items():
				if v is None or v is False:
					continue
				yield f" {k}" if v is True else f' {k}="{quoted(str(v))}"'
			yield ">"
			if self.name in HTML_VOID:
				return
			for child in self.children:
				if isinstance(child, Node):
					yield from child.iterHTML()
				else:
					yield escape(str(child))
			yield f"</{self.name}>"

	def __str__(self) -> str:
		return "".join(self.iterHTML())


def text(value: str) -> Node:
	return Node("#text", attributes={"#value": value})


def raw(html: str) -> Node:
	"""Wraps already-rendered HTML so that it is output verbatim."""
	return Node("#raw", attributes={"#value": html})


NodeFactory = Callable[
	[
		VarArg(TNodeContent | list[TNodeContent] | None),
		KwArg(TAttributeContent),
	],
	Node,
]


def nodeFactory(name: str) -> NodeFactory:
	def f(
		*children: TNodeContent | list[TNodeContent] | None,
		**attributes: TAttributeContent,
	) -> Node:
		content: list[TNodeContent] = []
		for _ in children:
			if _ is None:
				continue
			elif isinstance(_, (list, tuple)):
				content += [text(c) if isinstance(c, str) else c for c in _]
			else:
				content.append(text(_) if isinstance(_, str) else _)
		# `_` stands for `class`, which is a reserved word
		attrs: dict[str, TAttributeContent] = {
			("class" if k == "_" else k): v for k, v in attributes.items()
		}
		return Node(name, content, attrs)

	f.__name__ = name
	return cast(NodeFactory, f)


HTML_TAGS: list[LiteralString] = (
	"""\
a body code div footer h1 h2 head header html li main meta nav p pre section
small span style table tbody td th thead title tr ul\
""".split()
)


class Markup:
	"""Exposes node factories as attributes, as in `H.div(...)`."""

	__slots__ = ["_factories"]

	def __init__(self, factories: dict[str, NodeFactory]):
		self._factories: dict[str, NodeFactory] = factories

	def __getattr__(self, name: str) -> NodeFactory:
		factories = self._factories
		if name not in factories:
			raise AttributeError(
				f"No tag {name}, pick one of {','.join(factories.keys())}"
			)
		return factories[name]


H: Markup = Markup({_: nodeFactory(_) for _ in HTML_TAGS})


def html(*nodes: Node, doctype: str | None = "html") -> str:
	"""Serializes the given nodes as an HTML document."""
	head: str = f"<!DOCTYPE {doctype}>\n" if doctype else ""
	return head + "".join(chunk for node in nodes for chunk in node.iterHTML())


# EOF
