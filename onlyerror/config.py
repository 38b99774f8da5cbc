# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Derive configuration.

Options come from an optional JSON file (`{"format": "onlyerror-config",
"version": 0, ...}`) and CLI flags, with flags winning. Unknown keys are
rejected so typos do not silently fall back to defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Tuple


@dataclass(frozen=True)
class DeriveConfig:
	# Emit `::core` paths (core::error::Error) instead of `::std`.
	no_std: bool = False
	message_attributes: Tuple[str, ...] = ("error", "message")
	from_attribute: str = "from"
	source_attribute: str = "source"
	no_display_attribute: str = "no_display"

	def __post_init__(self) -> None:
		if not self.message_attributes:
			raise ValueError("message_attributes must name at least one attribute")
		names = [*self.message_attributes, self.from_attribute, self.source_attribute, self.no_display_attribute]
		for name in names:
			if not isinstance(name, str) or not name.isidentifier():
				raise ValueError(f"invalid attribute name {name!r}")
			if name == "doc":
				# Doc comments are parsed as `doc` attributes.
				raise ValueError("attribute name 'doc' is reserved for doc comments")
		if len(set(names)) != len(names):
			raise ValueError("attribute names must be distinct")

	@property
	def cause_attributes(self) -> Tuple[str, str]:
		return (self.from_attribute, self.source_attribute)

	def with_overrides(self, **changes: Any) -> "DeriveConfig":
		return replace(self, **changes)


_CONFIG_FORMAT = "onlyerror-config"
_OPTION_NAMES = {f.name for f in fields(DeriveConfig)}


def derive_config_from_dict(data: Mapping[str, Any]) -> DeriveConfig:
	if not isinstance(data, Mapping):
		raise ValueError("config must be a JSON object")
	if data.get("format") != _CONFIG_FORMAT or data.get("version") != 0:
		raise ValueError(f"unsupported config format/version (expected format '{_CONFIG_FORMAT}', version 0)")
	unknown = sorted(set(data.keys()) - _OPTION_NAMES - {"format", "version"})
	if unknown:
		raise ValueError(f"config has unknown fields: {', '.join(unknown)}")
	options: dict[str, Any] = {}
	if "no_std" in data:
		if not isinstance(data["no_std"], bool):
			raise ValueError("config 'no_std' must be a boolean")
		options["no_std"] = data["no_std"]
	if "message_attributes" in data:
		attrs = data["message_attributes"]
		if not isinstance(attrs, list) or not all(isinstance(a, str) for a in attrs):
			raise ValueError("config 'message_attributes' must be a list of strings")
		options["message_attributes"] = tuple(attrs)
	for key in ("from_attribute", "source_attribute", "no_display_attribute"):
		if key in data:
			if not isinstance(data[key], str):
				raise ValueError(f"config '{key}' must be a string")
			options[key] = data[key]
	return DeriveConfig(**options)


def load_derive_config(path: Path) -> DeriveConfig:
	try:
		data = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as err:
		raise ValueError(f"config {path} is not valid JSON: {err}") from err
	return derive_config_from_dict(data)


__all__ = ["DeriveConfig", "derive_config_from_dict", "load_derive_config"]
