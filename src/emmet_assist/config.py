"""Editor-side Emmet configuration.

``EmmetConfig`` is an immutable snapshot: the core reads it but never
changes it. Loading accepts both ``snake_case`` keys and the ``camelCase``
keys used by editor settings files (``previewEnabled``, ``markupStyle``).
"""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TypeAlias

import orjson

from emmet_assist.io_utils import dumps, load_json
from emmet_assist.syntax import get_syntax_type, is_supported

log = logging.getLogger(__name__)

# ``True`` / ``False`` for every syntax, or a tuple of syntax names and/or
# abbreviation types (``markup``, ``stylesheet``).
EnableForSyntax: TypeAlias = bool | tuple[str, ...]

_ATTRIBUTE_QUOTES = ("single", "double")
_MARKUP_STYLES = ("html", "xhtml", "xml")


class ConfigError(ValueError):
    """Invalid configuration key or value."""


@dataclass(frozen=True, slots=True)
class EmmetConfig:
    syntax: str = "html"
    mark: EnableForSyntax = True
    preview_enabled: EnableForSyntax = True
    attribute_quotes: Literal["single", "double"] = "double"
    markup_style: Literal["html", "xhtml", "xml"] = "html"
    comments: bool = False
    comments_template: str = "<!-- /[#ID][.CLASS] -->"
    bem: bool = False
    short_hex: bool = True
    completion_boost: int = 99
    # Global expander config: snippets, variables and options per syntax
    config: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not is_supported(self.syntax):
            raise ConfigError(f"unsupported syntax: {self.syntax!r}")
        if self.attribute_quotes not in _ATTRIBUTE_QUOTES:
            raise ConfigError(
                f"attribute_quotes must be one of {_ATTRIBUTE_QUOTES}, got {self.attribute_quotes!r}"
            )
        if self.markup_style not in _MARKUP_STYLES:
            raise ConfigError(
                f"markup_style must be one of {_MARKUP_STYLES}, got {self.markup_style!r}"
            )
        for name in ("mark", "preview_enabled"):
            value = getattr(self, name)
            if isinstance(value, list):
                object.__setattr__(self, name, tuple(value))
            elif not isinstance(value, (bool, tuple)):
                raise ConfigError(f"{name} must be a bool or a list of syntaxes, got {value!r}")

    def fingerprint(self) -> bytes:
        """Stable identity of this configuration, used as a cache key."""
        return dumps(config_to_dict(self))


def enabled_for_syntax(opt: EnableForSyntax, syntax: str, syntax_type: str | None = None) -> bool:
    """Check if an ``EnableForSyntax`` option allows given syntax."""
    if opt is True:
        return True
    if not opt:
        return False
    if syntax_type is None:
        syntax_type = get_syntax_type(syntax)
    return syntax in opt or syntax_type in opt


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(EmmetConfig))

_CAMEL_ALIASES = {
    "previewEnabled": "preview_enabled",
    "attributeQuotes": "attribute_quotes",
    "markupStyle": "markup_style",
    "commentsTemplate": "comments_template",
    "shortHex": "short_hex",
    "completionBoost": "completion_boost",
}


def _normalize(data: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in data.items():
        name = _CAMEL_ALIASES.get(key, key)
        if name not in _FIELD_NAMES:
            raise ConfigError(f"unknown config key: {key!r}")
        if isinstance(value, list):
            value = tuple(value)
        result[name] = value
    return result


def config_from_dict(data: Mapping[str, Any]) -> EmmetConfig:
    return EmmetConfig(**_normalize(data))


def merge_config(base: EmmetConfig, overrides: Mapping[str, Any]) -> EmmetConfig:
    """Return ``base`` with ``overrides`` applied; ``base`` is left as is."""
    if not overrides:
        return base
    return dataclasses.replace(base, **_normalize(overrides))


def load_config(path: Path) -> EmmetConfig:
    """Load config from a JSON file; the top-level ``emmet`` key is optional."""
    try:
        data = load_json(path)
    except orjson.JSONDecodeError as e:
        raise ConfigError(f"{path}: invalid JSON: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("emmet"), dict):
        data = data["emmet"]
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a JSON object")

    config = config_from_dict(data)
    log.debug("Loaded config from %s (syntax=%s)", path, config.syntax)
    return config


def config_to_dict(config: EmmetConfig) -> dict[str, Any]:
    payload = dataclasses.asdict(config)
    for name in ("mark", "preview_enabled"):
        if isinstance(payload[name], tuple):
            payload[name] = list(payload[name])
    return payload
