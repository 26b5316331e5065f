"""Template engine for tool metadata.

Templates are plain text with ``{ input.<path> }`` expressions, optionally
piped through one formatter: ``{ input.query | url_encode }``. Any brace that
does not open an ``input`` expression is literal, so JSON bodies can be
written as-is::

    {"query": { input.query | json }, "limit": { input.limit }}
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Union
from urllib.parse import quote

from dynamic_mcp.errors import RenderError, TemplateSyntaxError

Formatter = Callable[[Any], str]

ROOT_SYMBOL = "input"

# Anything that looks like it wants to be an expression; must then match the grammar.
_CANDIDATE_RE = re.compile(r"\{\s*input\b[^{}]*\}")
_EXPRESSION_RE = re.compile(
    r"\{\s*(?P<path>input(?:\.[A-Za-z0-9_-]+)*)\s*(?:\|\s*(?P<formatter>[A-Za-z_][A-Za-z0-9_]*)\s*)?\}"
)


def stringify(value: Any) -> str:
    """Default formatter: strings pass through, everything else as compact JSON."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def url_encode(value: Any) -> str:
    # Only RFC 3986 unreserved characters survive; re-encoding "%20" gives "%2520".
    return quote(stringify(value), safe="")


def json_encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


_FORMATTERS: dict[str, Formatter] = {
    "url_encode": url_encode,
    "json": json_encode,
}


def register_formatter(name: str, formatter: Formatter) -> None:
    """Make ``formatter`` available as ``{ input.x | name }`` in templates parsed afterwards."""
    if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
        raise ValueError(f"Invalid formatter name: {name!r}")
    _FORMATTERS[name] = formatter
    _parse.cache_clear()


def formatter_names() -> list[str]:
    return sorted(_FORMATTERS)


@dataclass(frozen=True)
class LiteralSegment:
    text: str


@dataclass(frozen=True)
class Expression:
    source: str
    path: tuple[str, ...]
    formatter_name: str | None
    formatter: Formatter

    def resolve(self, context: Any) -> Any:
        value = context
        walked = ROOT_SYMBOL
        for segment in self.path:
            location = f"{walked}.{segment}"
            if isinstance(value, Mapping):
                if segment not in value:
                    raise RenderError(self.source, location, "missing field")
                value = value[segment]
            elif isinstance(value, list):
                if not segment.isdigit():
                    raise RenderError(self.source, location, "expected an array index")
                index = int(segment)
                if index >= len(value):
                    raise RenderError(self.source, location, f"index out of range (length {len(value)})")
                value = value[index]
            else:
                raise RenderError(self.source, location, f"cannot index into {type(value).__name__}")
            walked = location
        return value

    def render(self, context: Any) -> str:
        return self.formatter(self.resolve(context))


Segment = Union[LiteralSegment, Expression]


@dataclass(frozen=True)
class Template:
    source: str
    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, text: str) -> "Template":
        return _parse(text)

    @property
    def expressions(self) -> list[Expression]:
        return [segment for segment in self.segments if isinstance(segment, Expression)]

    def render(self, context: Any) -> str:
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, LiteralSegment):
                parts.append(segment.text)
            else:
                parts.append(segment.render(context))
        return "".join(parts)


@lru_cache(maxsize=256)
def _parse(text: str) -> Template:
    segments: list[Segment] = []
    cursor = 0
    for candidate in _CANDIDATE_RE.finditer(text):
        match = _EXPRESSION_RE.fullmatch(candidate.group(0))
        if match is None:
            raise TemplateSyntaxError(f"Malformed template expression {candidate.group(0)!r} in {text!r}")
        if candidate.start() > cursor:
            segments.append(LiteralSegment(text[cursor : candidate.start()]))
        formatter_name = match.group("formatter")
        if formatter_name is None:
            formatter = stringify
        else:
            found = _FORMATTERS.get(formatter_name)
            if found is None:
                raise TemplateSyntaxError(
                    f"Unknown formatter {formatter_name!r} in {candidate.group(0)!r}. "
                    f"Available: {formatter_names()}"
                )
            formatter = found
        path = tuple(match.group("path").split("."))[1:]
        segments.append(Expression(candidate.group(0), path, formatter_name, formatter))
        cursor = candidate.end()
    if cursor < len(text):
        segments.append(LiteralSegment(text[cursor:]))
    return Template(text, tuple(segments))


def render(template: str, context: Any) -> str:
    """Render ``template`` with ``context`` bound to the ``input`` root symbol."""
    return Template.parse(template).render(context)
