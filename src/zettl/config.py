"""Per-zettelkasten configuration stored as YAML in ``.zettl/config.yml``."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from zettl.errors import FilesystemError, SerializationError


@dataclass
class Config:
    name: str = "My Zettelkasten"
    author: str = "Me"
    editor_cmd: str = "vim"
    editor_args: list[str] = field(default_factory=list)
    #: Rebuild ``_index.md`` files after creating or opening a note
    indexes: bool = True
    #: Rebuild ``.graph.json`` after creating or opening a note
    graph: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Build a config from parsed YAML; raises SerializationError on a mistyped value."""
        values = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if not _matches(value, _FIELD_TYPES[f.name]):
                raise SerializationError(
                    f"Config key {f.name!r} must be {_TYPE_NAMES[_FIELD_TYPES[f.name]]}, got {value!r}"
                )
            values[f.name] = list(value) if isinstance(value, list) else value
        return cls(**values)

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load a config file; keys it does not set keep their defaults."""
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise FilesystemError("read config", path, exc.strerror) from exc
        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as exc:
            raise SerializationError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SerializationError(f"{path} must contain a mapping, got {type(data).__name__}")
        return cls.from_dict(data)

    def dump(self) -> str:
        return yaml.safe_dump(asdict(self), sort_keys=False, allow_unicode=True)

    def save(self, path: Path) -> None:
        try:
            Path(path).write_text(self.dump(), encoding="utf-8")
        except OSError as exc:
            raise FilesystemError("write config", path, exc.strerror) from exc


_FIELD_TYPES = {
    "name": str,
    "author": str,
    "editor_cmd": str,
    "editor_args": list,
    "indexes": bool,
    "graph": bool,
}
_TYPE_NAMES = {str: "a string", list: "a list of strings", bool: "true or false"}


def _matches(value: Any, expected: type) -> bool:
    if expected is list:
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    return isinstance(value, expected)
