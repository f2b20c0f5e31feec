"""Abbreviation parsing and expansion through py-emmet.

Every py-emmet failure is translated into ``AbbreviationError`` here so
callers deal with a single exception type.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import emmet
from emmet.config import Config

from emmet_assist.expander import (
    AbbreviationError,
    ExtractedAbbreviation,
    ParsedAbbreviation,
    is_simple_markup_abbreviation,
)
from emmet_assist.output import preview_options
from emmet_assist.syntax import SyntaxType

if TYPE_CHECKING:
    from emmet_assist.activation import ActivationOptions
    from emmet_assist.config import EmmetConfig

log = logging.getLogger(__name__)


def _translate(err: Exception) -> AbbreviationError:
    message = getattr(err, "message", None) or str(err)
    pos = getattr(err, "pos", None)
    return AbbreviationError(message, pos if isinstance(pos, int) else 0)


def user_config(options: ActivationOptions, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """py-emmet user config for given activation options."""
    opt: dict[str, Any] = {
        "type": options.type,
        "syntax": options.syntax,
        "options": {**options.options, **(overrides or {})},
    }
    if options.context is not None:
        opt["context"] = {
            "name": options.context.name,
            "attributes": dict(options.context.attributes),
        }
    if options.text is not None:
        opt["text"] = list(options.text)
    return opt


class EmmetExpander:
    """``Expander`` backed by py-emmet.

    Preview expansions are memoized; the memo belongs to one configuration
    and is dropped as soon as another configuration is seen.
    """

    def __init__(self, max_cache: int = 512) -> None:
        self.max_cache = max_cache
        self._fingerprint: bytes | None = None
        self._previews: dict[tuple[Any, ...], str] = {}

    def reset_cache(self) -> None:
        self._previews.clear()
        self._fingerprint = None

    def _sync_config(self, config: EmmetConfig) -> None:
        fingerprint = config.fingerprint()
        if fingerprint != self._fingerprint:
            if self._fingerprint is not None:
                log.debug("Emmet config changed, dropping %d cached previews", len(self._previews))
            self._previews.clear()
            self._fingerprint = fingerprint

    def _config(self, options: ActivationOptions, config: EmmetConfig | None) -> Config:
        return Config(user_config(options), config.config if config is not None else {})

    def parse_markup(
        self, abbreviation: str, options: ActivationOptions, config: EmmetConfig | None = None,
    ) -> ParsedAbbreviation:
        resolved = self._config(options, config)
        try:
            parsed = emmet.markup_abbreviation(abbreviation, resolved)
        except Exception as err:
            raise _translate(err) from err
        return ParsedAbbreviation(
            abbreviation=abbreviation,
            type="markup",
            simple=is_simple_markup_abbreviation(parsed.children),
            payload=parsed,
        )

    def parse_stylesheet(
        self, abbreviation: str, options: ActivationOptions, config: EmmetConfig | None = None,
    ) -> ParsedAbbreviation:
        resolved = self._config(options, config)
        try:
            parsed = emmet.stylesheet_abbreviation(abbreviation, resolved)
        except Exception as err:
            raise _translate(err) from err
        return ParsedAbbreviation(abbreviation=abbreviation, type="stylesheet", payload=parsed)

    def expand(
        self,
        abbreviation: str | ParsedAbbreviation,
        options: ActivationOptions,
        config: EmmetConfig,
        *,
        preview: bool = False,
    ) -> str:
        self._sync_config(config)
        source = abbreviation.abbreviation if isinstance(abbreviation, ParsedAbbreviation) else abbreviation

        key: tuple[Any, ...] | None = None
        if preview:
            key = _preview_key(source, options)
            cached = self._previews.get(key)
            if cached is not None:
                return cached

        opt = user_config(options)
        if preview:
            opt["options"] = preview_options(opt["options"])

        parsed = abbreviation if isinstance(abbreviation, ParsedAbbreviation) else None
        try:
            if parsed is not None and parsed.payload is not None and parsed.type == options.type:
                result = _stringify(parsed, Config(opt, config.config))
            else:
                result = emmet.expand(source, opt, config.config)
        except Exception as err:
            raise _translate(err) from err

        if key is not None:
            if len(self._previews) >= self.max_cache:
                self._previews.clear()
            self._previews[key] = result
        return result

    def extract(self, line: str, pos: int, syntax_type: SyntaxType = "markup") -> ExtractedAbbreviation | None:
        data = emmet.extract(line, pos, {
            "lookAhead": syntax_type != "stylesheet",
            "type": syntax_type,
        })
        if not data:
            return None
        return ExtractedAbbreviation(
            abbreviation=_get(data, "abbreviation"),
            start=_get(data, "start"),
            end=_get(data, "end"),
            location=_get(data, "location"),
        )


def _get(data: Any, name: str) -> Any:
    return data[name] if isinstance(data, Mapping) else getattr(data, name)


def _preview_key(abbreviation: str, options: ActivationOptions) -> tuple[Any, ...]:
    context = options.context
    ctx_key = None
    if context is not None:
        ctx_key = (context.name, tuple(sorted((k, v or "") for k, v in context.attributes.items())))
    opts_key = tuple(sorted(
        (k, v) for k, v in options.options.items()
        if k not in ("output.field", "output.indent", "output.baseIndent")
        and isinstance(v, (str, int, float, bool))
    ))
    return (abbreviation, options.type, options.syntax, ctx_key, opts_key, options.text)


def _stringify(parsed: ParsedAbbreviation, config: Config) -> str:
    if parsed.type == "stylesheet":
        return emmet.stringify_stylesheet(parsed.payload, config)
    return emmet.stringify_markup(parsed.payload, config)
