# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Token cursor over a sequence of token trees.

The grammar accepted by the derive is LL(1): every decision is made by looking
at the next tree only, and every `expect_*`/`read_*` either consumes a tree of
the requested shape or raises `UnexpectedToken` pointing at the offending tree
(or at end-of-input). There is no backtracking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from onlyerror.core.span import Span
from onlyerror.errors import UnexpectedToken

from .lexer import (
	BRACKET,
	PARENTHESIS,
	DocComment,
	Group,
	Ident,
	Literal,
	Punct,
	TokenTree,
	render_trees,
)


@dataclass(frozen=True)
class Attribute:
	"""
	One outer attribute: `#[name]`, `#[name(...)]`, `#[name = lit]`, or a doc
	comment (name "doc", `doc` holding its text).
	"""

	name: str
	span: Span
	args: Optional[Group] = None
	value: Optional[Literal] = None
	doc: Optional[str] = None

	@property
	def is_bare(self) -> bool:
		return self.args is None and self.value is None


@dataclass(frozen=True)
class TypePath:
	"""A field type, re-rendered from its tokens (e.g. `std::io::Error`)."""

	text: str
	span: Span


def _describe(tree: Optional[TokenTree]) -> str:
	if tree is None:
		return "end of input"
	return tree.describe()


class TokenCursor:
	def __init__(self, trees: Sequence[TokenTree], *, end_span: Span) -> None:
		self._trees = list(trees)
		self._pos = 0
		self._end_span = end_span

	@classmethod
	def from_group(cls, group: Group) -> "TokenCursor":
		"""Cursor over a group's contents; end-of-input points at its closing delimiter."""
		return cls(group.trees, end_span=group.close_span)

	def has_more(self) -> bool:
		return self._pos < len(self._trees)

	def peek(self) -> Optional[TokenTree]:
		if self._pos < len(self._trees):
			return self._trees[self._pos]
		return None

	def next(self) -> Optional[TokenTree]:
		tree = self.peek()
		if tree is not None:
			self._pos += 1
		return tree

	def current_span(self) -> Span:
		tree = self.peek()
		return tree.span if tree is not None else self._end_span

	def _unexpected(self, expected: str) -> UnexpectedToken:
		return UnexpectedToken(
			f"expected {expected}, found {_describe(self.peek())}",
			span=self.current_span(),
		)

	def expect_ident(self, name: str) -> Ident:
		tree = self.peek()
		if isinstance(tree, Ident) and tree.text == name:
			self._pos += 1
			return tree
		raise self._unexpected(f"`{name}`")

	def eat_ident(self, name: str) -> Optional[Ident]:
		tree = self.peek()
		if isinstance(tree, Ident) and tree.text == name:
			self._pos += 1
			return tree
		return None

	def expect_punct(self, char: str) -> Punct:
		tree = self.peek()
		if isinstance(tree, Punct) and tree.char == char:
			self._pos += 1
			return tree
		raise self._unexpected(f"`{char}`")

	def eat_punct(self, char: str) -> Optional[Punct]:
		"""Consume `char` if it is next (optional separators)."""
		tree = self.peek()
		if isinstance(tree, Punct) and tree.char == char:
			self._pos += 1
			return tree
		return None

	def expect_group(self, delimiter: str) -> Group:
		tree = self.peek()
		if isinstance(tree, Group) and tree.delimiter == delimiter:
			self._pos += 1
			return tree
		closer = {"(": ")", "[": "]", "{": "}"}[delimiter]
		raise self._unexpected(f"`{delimiter}...{closer}`")

	def read_ident(self) -> Ident:
		tree = self.peek()
		if isinstance(tree, Ident):
			self._pos += 1
			return tree
		raise self._unexpected("identifier")

	def read_literal_string(self) -> tuple[str, Literal]:
		"""Consume a string literal and return its decoded value plus the token."""
		tree = self.peek()
		if not (isinstance(tree, Literal) and tree.is_string):
			raise self._unexpected("string literal")
		try:
			value = tree.string_value()
		except ValueError as err:
			raise UnexpectedToken(str(err), span=tree.span) from err
		self._pos += 1
		return value, tree

	def expect_end(self) -> None:
		if self.has_more():
			raise UnexpectedToken(f"unexpected {_describe(self.peek())}", span=self.current_span())

	def parse_path(self) -> tuple[str, Ident]:
		"""`ident (:: ident)*`; returns the joined path and its first segment."""
		first = self.read_ident()
		segments = [first.text]
		while True:
			tree = self.peek()
			if not (isinstance(tree, Punct) and tree.char == ":" and tree.joint):
				break
			self._pos += 1
			self.expect_punct(":")
			segments.append(self.read_ident().text)
		return "::".join(segments), first

	def parse_attributes(self) -> List[Attribute]:
		"""Consume zero or more outer attributes and doc comments."""
		attrs: List[Attribute] = []
		while True:
			tree = self.peek()
			if isinstance(tree, DocComment):
				self._pos += 1
				attrs.append(Attribute(name="doc", span=tree.span, doc=tree.text))
				continue
			if isinstance(tree, Punct) and tree.char == "#":
				self._pos += 1
				bang = self.peek()
				if isinstance(bang, Punct) and bang.char == "!":
					raise UnexpectedToken("inner attributes are not allowed here", span=self.current_span())
				body = self.expect_group(BRACKET)
				attrs.append(_parse_attribute_body(body))
				continue
			return attrs

	def parse_visibility(self) -> Optional[str]:
		"""Consume `pub`, `pub(crate)`, `pub(super)` or `pub(in path)` if present."""
		if self.eat_ident("pub") is None:
			return None
		tree = self.peek()
		if isinstance(tree, Group) and tree.delimiter == PARENTHESIS:
			self._pos += 1
			return f"pub{tree.render()}"
		return "pub"

	def parse_type(self) -> TypePath:
		"""
		Consume a type up to (not including) the next top-level `,`.

		Groups are atomic; only `<`/`>` need depth tracking, with `->` not
		counted as a closing angle.
		"""
		trees: list[TokenTree] = []
		depth = 0
		while self.has_more():
			tree = self._trees[self._pos]
			if isinstance(tree, Punct):
				if tree.char == "," and depth == 0:
					break
				if tree.char == "<":
					depth += 1
				elif tree.char == ">" and not _is_arrow_head(trees):
					if depth == 0:
						raise UnexpectedToken("unbalanced `>` in type", span=tree.span)
					depth -= 1
			trees.append(tree)
			self._pos += 1
		if not trees:
			raise self._unexpected("type")
		if depth:
			raise UnexpectedToken("unclosed `<` in type", span=trees[0].span)
		first, last = trees[0].span, trees[-1].span
		span = Span(
			file=first.file,
			line=first.line,
			column=first.column,
			end_line=last.end_line,
			end_column=last.end_column,
		)
		return TypePath(text=render_trees(trees), span=span)


def _is_arrow_head(trees: Sequence[TokenTree]) -> bool:
	if not trees:
		return False
	prev = trees[-1]
	return isinstance(prev, Punct) and prev.char == "-" and prev.joint


def _parse_attribute_body(body: Group) -> Attribute:
	inner = TokenCursor.from_group(body)
	name, first = inner.parse_path()
	args: Optional[Group] = None
	value: Optional[Literal] = None
	doc: Optional[str] = None
	tree = inner.peek()
	if isinstance(tree, Group):
		args = tree
		inner.next()
	elif inner.eat_punct("=") is not None:
		lit = inner.peek()
		if not isinstance(lit, Literal):
			raise UnexpectedToken(f"expected literal, found {_describe(lit)}", span=inner.current_span())
		inner.next()
		value = lit
		if name == "doc" and lit.is_string:
			try:
				doc = lit.string_value()
			except ValueError as err:
				raise UnexpectedToken(str(err), span=lit.span) from err
	inner.expect_end()
	return Attribute(name=name, span=first.span, args=args, value=value, doc=doc)


__all__ = ["Attribute", "TypePath", "TokenCursor"]
