# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rust token lexer and token-tree folding.

The lexer is a lark basic lexer driven through a trivial LALR grammar
(`start: _token*`), so every token comes back with lark's line/column
bookkeeping. Flat tokens are then folded into token trees the way a Rust
token stream nests delimited groups:

  Ident | Punct | Literal | Lifetime | DocComment | Group(delimiter, trees)

Plain comments and whitespace are dropped; `///` and `/** */` survive as
DocComment trees so attribute parsing can turn them into doc attributes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from lark import Lark, Token
from lark.exceptions import UnexpectedInput

from onlyerror.core.span import Span
from onlyerror.errors import UnexpectedToken

_GRAMMAR_SRC = r"""
start: _token*

_token: DOC_COMMENT
	| IDENT
	| LIFETIME
	| STRING
	| RAW_STRING
	| CHAR
	| NUMBER
	| OPEN
	| CLOSE
	| PUNCT

DOC_COMMENT.5: /\/\/\/(?!\/)[^\n]*/
	| /\/\*\*(?![*\/])[\s\S]*?\*\//
LINE_COMMENT.4: /\/\/[^\n]*/
BLOCK_COMMENT.4: /\/\*[\s\S]*?\*\//
RAW_STRING.3: /r"[^"]*"/
	| /r#"[\s\S]*?"#/
	| /r##"[\s\S]*?"##/
STRING.3: /"(?:[^"\\]|\\[\s\S])*"/
CHAR.3: /'(?:[^'\\\n]|\\(?:[nrt0\\'"]|x[0-9a-fA-F]{2}|u\{[0-9a-fA-F]{1,6}\}))'/
LIFETIME.2: /'[A-Za-z_][A-Za-z0-9_]*/
IDENT: /(?:r#)?[A-Za-z_][A-Za-z0-9_]*/
NUMBER: /[0-9][0-9A-Za-z_]*/
OPEN: /[(\[{]/
CLOSE: /[)\]}]/
PUNCT: /[~!@#$%^&*+=|;:,.<>?\/-]/

%import common.WS
%ignore WS
%ignore LINE_COMMENT
%ignore BLOCK_COMMENT
"""

_LEXER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	maybe_placeholders=False,
)

PARENTHESIS = "("
BRACKET = "["
BRACE = "{"

_CLOSERS = {PARENTHESIS: ")", BRACKET: "]", BRACE: "}"}


@dataclass(frozen=True)
class TokenTree:
	"""Common base: a span plus source offsets (used to re-render type text)."""

	span: Span
	start: int
	end: int

	def render(self) -> str:
		raise NotImplementedError

	def describe(self) -> str:
		return f"`{self.render()}`"


@dataclass(frozen=True)
class Ident(TokenTree):
	text: str

	def render(self) -> str:
		return self.text


@dataclass(frozen=True)
class Punct(TokenTree):
	char: str
	# True when the next token is punctuation glued to this one (`::`, `->`).
	joint: bool = False

	def render(self) -> str:
		return self.char


@dataclass(frozen=True)
class Literal(TokenTree):
	text: str
	kind: str  # "str" | "raw_str" | "char" | "number"

	def render(self) -> str:
		return self.text

	@property
	def is_string(self) -> bool:
		return self.kind in ("str", "raw_str")

	def string_value(self) -> str:
		"""Decoded contents of a string literal (ValueError on bad escapes)."""
		if self.kind == "raw_str":
			hashes = len(self.text) - len(self.text[1:].lstrip("#")) - 1
			return self.text[2 + hashes : len(self.text) - 1 - hashes]
		if self.kind == "str":
			return decode_string_literal(self.text[1:-1])
		raise ValueError(f"{self.kind} literal is not a string")


@dataclass(frozen=True)
class Lifetime(TokenTree):
	text: str

	def render(self) -> str:
		return self.text


@dataclass(frozen=True)
class DocComment(TokenTree):
	text: str

	def render(self) -> str:
		return f"///{self.text}"

	def describe(self) -> str:
		return "doc comment"


@dataclass(frozen=True)
class Group(TokenTree):
	delimiter: str
	trees: Tuple[TokenTree, ...]
	close_span: Span

	def render(self) -> str:
		inner = render_trees(self.trees, start=self.start + 1, end=self.end - 1)
		return f"{self.delimiter}{inner}{_CLOSERS[self.delimiter]}"

	def describe(self) -> str:
		return f"`{self.delimiter}...{_CLOSERS[self.delimiter]}`"


def render_trees(trees: Sequence[TokenTree], *, start: Optional[int] = None, end: Optional[int] = None) -> str:
	"""
	Render token trees back to text.

	Source whitespace (or comments) between two trees collapses to a single
	space; adjacent trees stay adjacent. `start`/`end` bound the enclosing
	region so padding inside a group is reproduced the same way.
	"""
	parts: list[str] = []
	prev_end = start
	for tree in trees:
		if prev_end is not None and tree.start > prev_end:
			parts.append(" ")
		parts.append(tree.render())
		prev_end = tree.end
	if trees and end is not None and end > trees[-1].end:
		parts.append(" ")
	return "".join(parts)


_ESCAPE_RE = re.compile(r"\\(?:x([0-9a-fA-F]{2})|u\{([0-9a-fA-F_]{1,8})\}|(\n\s*)|(.))", re.S)
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", "0": "\0", "'": "'", '"': '"'}


def _unescape(m: "re.Match[str]") -> str:
	if m.group(1) is not None:
		code = int(m.group(1), 16)
		if code > 0x7F:
			raise ValueError(f"out of range hex escape `\\x{m.group(1)}`")
		return chr(code)
	if m.group(2) is not None:
		code = int(m.group(2).replace("_", ""), 16)
		if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
			raise ValueError(f"invalid unicode escape `\\u{{{m.group(2)}}}`")
		return chr(code)
	if m.group(3) is not None:
		# Line continuation: backslash-newline eats the following whitespace.
		return ""
	ch = m.group(4)
	if ch in _SIMPLE_ESCAPES:
		return _SIMPLE_ESCAPES[ch]
	raise ValueError(f"unknown character escape `\\{ch}`")


def decode_string_literal(body: str) -> str:
	"""Interpret Rust escapes in the body of a (non-raw) string literal."""
	return _ESCAPE_RE.sub(_unescape, body)


def _doc_text(value: str) -> str:
	if value.startswith("///"):
		return value[3:]
	body = value[3:-2]
	lines = []
	for line in body.splitlines():
		stripped = line.strip()
		if stripped.startswith("*"):
			stripped = stripped[1:]
		lines.append(stripped)
	return "\n".join(lines)


def _lex(source: str, file: Optional[str]) -> List[Token]:
	try:
		tree = _LEXER.parse(source)
	except UnexpectedInput as err:
		span = Span(
			file=file,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			raw=err,
		)
		char = getattr(err, "char", None)
		msg = f"unexpected character `{char}`" if char else "unexpected input"
		raise UnexpectedToken(msg, span=span) from err
	return [tok for tok in tree.children if isinstance(tok, Token)]


def _leaf(tok: Token, span: Span, joint: bool) -> TokenTree:
	kind = tok.type
	text = str(tok)
	start, end = tok.start_pos, tok.end_pos
	if kind == "IDENT":
		return Ident(span=span, start=start, end=end, text=text)
	if kind == "PUNCT":
		return Punct(span=span, start=start, end=end, char=text, joint=joint)
	if kind == "LIFETIME":
		return Lifetime(span=span, start=start, end=end, text=text)
	if kind == "DOC_COMMENT":
		return DocComment(span=span, start=start, end=end, text=_doc_text(text))
	if kind == "STRING":
		return Literal(span=span, start=start, end=end, text=text, kind="str")
	if kind == "RAW_STRING":
		return Literal(span=span, start=start, end=end, text=text, kind="raw_str")
	if kind == "CHAR":
		return Literal(span=span, start=start, end=end, text=text, kind="char")
	if kind == "NUMBER":
		return Literal(span=span, start=start, end=end, text=text, kind="number")
	raise UnexpectedToken(f"unexpected token `{text}`", span=span)


def tokenize(source: str, *, file: Optional[str] = None) -> List[TokenTree]:
	"""
	Lex `source` and fold it into token trees.

	Raises UnexpectedToken for characters the lexer cannot classify and for
	unbalanced or mismatched delimiters.
	"""
	tokens = _lex(source, file)
	# Each frame: (opening token, its span, the tree list it will be appended to).
	stack: list[tuple[Token, Span, list[TokenTree]]] = []
	current: list[TokenTree] = []
	for idx, tok in enumerate(tokens):
		span = Span.from_loc(tok, file=file)
		if tok.type == "OPEN":
			stack.append((tok, span, current))
			current = []
			continue
		if tok.type == "CLOSE":
			if not stack:
				raise UnexpectedToken(f"unexpected closing delimiter `{tok}`", span=span)
			open_tok, open_span, parent = stack.pop()
			expected = _CLOSERS[str(open_tok)]
			if str(tok) != expected:
				raise UnexpectedToken(f"mismatched closing delimiter `{tok}`; expected `{expected}`", span=span)
			group_span = Span(
				file=file,
				line=open_span.line,
				column=open_span.column,
				end_line=span.end_line,
				end_column=span.end_column,
			)
			parent.append(
				Group(
					span=group_span,
					start=open_tok.start_pos,
					end=tok.end_pos,
					delimiter=str(open_tok),
					trees=tuple(current),
					close_span=span,
				)
			)
			current = parent
			continue
		nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
		joint = nxt is not None and nxt.type == "PUNCT" and nxt.start_pos == tok.end_pos
		current.append(_leaf(tok, span, joint))
	if stack:
		open_tok, open_span, _parent = stack[-1]
		raise UnexpectedToken(f"unclosed delimiter `{open_tok}`", span=open_span)
	return current


def end_of_input_span(source: str, *, file: Optional[str] = None) -> Span:
	"""Span pointing just past the last character of `source`."""
	lines = source.split("\n")
	line = len(lines)
	column = len(lines[-1]) + 1
	return Span(file=file, line=line, column=column, end_line=line, end_column=column)


__all__ = [
	"PARENTHESIS",
	"BRACKET",
	"BRACE",
	"TokenTree",
	"Ident",
	"Punct",
	"Literal",
	"Lifetime",
	"DocComment",
	"Group",
	"render_trees",
	"decode_string_literal",
	"tokenize",
	"end_of_input_span",
]
