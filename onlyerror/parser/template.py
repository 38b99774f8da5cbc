# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Display template scanning (Rust format-string placeholder syntax).

`{{` and `}}` are literal braces; `{name}` and `{name:spec}` are placeholders.
Only the placeholder name matters for field binding; the spec after `:` is
carried through to the emitted template untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from onlyerror.core.span import Span
from onlyerror.errors import InvalidDisplayTemplate

from .model import tuple_alias

_INDEX_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Placeholder:
	name: str
	spec: Optional[str]
	# Offsets of `{` and one past `}` in the template.
	start: int
	end: int

	def render(self, name: Optional[str] = None) -> str:
		body = self.name if name is None else name
		if self.spec is not None:
			body = f"{body}:{self.spec}"
		return "{" + body + "}"


def scan_placeholders(template: str, *, span: Optional[Span] = None) -> List[Placeholder]:
	out: List[Placeholder] = []
	i = 0
	n = len(template)
	while i < n:
		ch = template[i]
		if ch == "{":
			if template.startswith("{{", i):
				i += 2
				continue
			close = template.find("}", i + 1)
			if close < 0 or "{" in template[i + 1 : close]:
				raise InvalidDisplayTemplate(
					f"invalid format string: unmatched `{{` at offset {i} in {template!r}",
					span=span,
				)
			name, sep, spec = template[i + 1 : close].partition(":")
			out.append(Placeholder(name=name, spec=spec if sep else None, start=i, end=close + 1))
			i = close + 1
			continue
		if ch == "}":
			if template.startswith("}}", i):
				i += 2
				continue
			raise InvalidDisplayTemplate(
				f"invalid format string: unmatched `}}` at offset {i} in {template!r}",
				span=span,
			)
		i += 1
	return out


def rewrite_positional(template: str, field_count: int, *, span: Optional[Span] = None) -> str:
	"""
	Rewrite `{i}` / `{i:spec}` to `{field_i}` / `{field_i:spec}` for every
	index below `field_count`. Escaped braces and out-of-range indices are
	left alone.
	"""
	parts: List[str] = []
	last = 0
	for ph in scan_placeholders(template, span=span):
		if not _INDEX_RE.fullmatch(ph.name) or int(ph.name) >= field_count:
			continue
		parts.append(template[last : ph.start])
		parts.append(ph.render(tuple_alias(str(int(ph.name)))))
		last = ph.end
	parts.append(template[last:])
	return "".join(parts)


def referenced_names(template: str, *, span: Optional[Span] = None) -> Tuple[str, ...]:
	"""Placeholder names in first-appearance order, without duplicates."""
	seen: dict[str, None] = {}
	for ph in scan_placeholders(template, span=span):
		seen.setdefault(ph.name, None)
	return tuple(seen)


__all__ = ["Placeholder", "scan_placeholders", "rewrite_positional", "referenced_names"]
