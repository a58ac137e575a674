"""Renderers turning an aggregate into text, JSON or Markdown."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict

from ..aggregate import ResultAggregate
from ..errors import OutputGenerationError
from .json_output import render_json
from .markdown import render_markdown
from .text import render_text


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @classmethod
    def parse(cls, value: "str | OutputFormat") -> "OutputFormat":
        if isinstance(value, OutputFormat):
            return value
        normalized = value.strip().lower()
        if normalized == "md":
            normalized = "markdown"
        try:
            return cls(normalized)
        except ValueError as exc:
            supported = ", ".join(item.value for item in cls)
            raise OutputGenerationError(f"Unsupported output format '{value}' (expected one of: {supported})") from exc


_EXTENSIONS = {
    OutputFormat.TEXT: ".txt",
    OutputFormat.JSON: ".json",
    OutputFormat.MARKDOWN: ".md",
}

_RENDERERS: Dict[OutputFormat, Callable[[ResultAggregate], str]] = {
    OutputFormat.TEXT: render_text,
    OutputFormat.JSON: render_json,
    OutputFormat.MARKDOWN: render_markdown,
}


def render(aggregate: ResultAggregate, fmt: "str | OutputFormat" = OutputFormat.TEXT) -> str:
    """Render ``aggregate`` in the requested format."""
    output_format = OutputFormat.parse(fmt)
    try:
        return _RENDERERS[output_format](aggregate)
    except OutputGenerationError:
        raise
    except Exception as exc:
        raise OutputGenerationError(f"Failed to generate {output_format.value} output: {exc}") from exc


__all__ = [
    "OutputFormat",
    "OutputGenerationError",
    "render",
    "render_json",
    "render_markdown",
    "render_text",
]
