"""Library for binding template bodies to a fixed record of values.

Templates are Jinja2 bodies rendered with strict undefined handling, so any
placeholder that is not a field of the record fails the whole bind rather
than silently rendering as empty. Two helpers are available both as filters
and as functions:

- `indent(value, width)` indents every line after the first by `width`
  spaces, for embedding multi-line PEM text into indented yaml scalars,
  e.g. `{{ root_ca_cert | indent(4) }}`.
- `add(i, j)` adds two integers, e.g. `{{ add(loop.index0, 1) }}`.
"""

import dataclasses
import logging
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError
from jinja2.exceptions import UndefinedError

from .exceptions import BindingError

__all__ = [
    "TemplateBinder",
    "bind",
    "indent",
    "add",
]

_LOGGER = logging.getLogger(__name__)


def indent(value: str, width: int) -> str:
    """Indent each embedded newline of the value by the number of spaces."""
    return value.replace("\n", "\n" + " " * width)


def add(i: int, j: int) -> int:
    """Add two integers."""
    return i + j


def _environment() -> Environment:
    jinja = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=False,
        lstrip_blocks=False,
    )
    jinja.filters["indent"] = indent
    jinja.filters["add"] = add
    jinja.globals["indent"] = indent
    jinja.globals["add"] = add
    return jinja


class TemplateBinder:
    """Renders template bodies against the fields of a dataclass record.

    The record is validated and copied once, so every body bound by the same
    binder sees the same values.
    """

    def __init__(self, data: Any) -> None:
        """Initialize TemplateBinder."""
        if not dataclasses.is_dataclass(data) or isinstance(data, type):
            raise BindingError(f"Template data must be a dataclass instance: {data!r}")
        missing = [
            field.name
            for field in dataclasses.fields(data)
            if getattr(data, field.name) is None
        ]
        if missing:
            raise BindingError(f"Template data is missing values for {missing}")
        self._values = dataclasses.asdict(data)
        self._jinja = _environment()

    def bind(self, body: str | bytes, name: str = "template") -> bytes:
        """Render the template body and return the encoded result."""
        try:
            text = body.decode() if isinstance(body, bytes) else body
        except UnicodeDecodeError as err:
            raise BindingError(f"Template {name} is not valid utf-8: {err}") from err
        try:
            rendered = self._jinja.from_string(text).render(**self._values)
        except TemplateSyntaxError as err:
            raise BindingError(
                f"Malformed template {name} on line {err.lineno}: {err.message}"
            ) from err
        except UndefinedError as err:
            raise BindingError(
                f"Unresolved value in template {name}: {err.message}"
            ) from err
        except (TemplateError, TypeError, ValueError) as err:
            raise BindingError(f"Failed to render template {name}: {err}") from err
        _LOGGER.debug("Bound template %s (%d bytes)", name, len(rendered))
        return rendered.encode()


def bind(body: str | bytes, data: Any, name: str = "template") -> bytes:
    """Render a single template body against a dataclass record."""
    return TemplateBinder(data).bind(body, name)
