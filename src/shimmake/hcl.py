"""HCL loading — render Jinja2 templates and parse the result with python-hcl2."""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any

import hcl2
import jinja2

from .errors import ConfigError

logger = logging.getLogger(__name__)


def render(text: str, *, context: dict[str, Any] | None = None, source: str = "<string>") -> str:
    """Render HCL text as a Jinja2 template."""
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    try:
        return env.from_string(text).render(context if context is not None else {})
    except jinja2.TemplateError as exc:
        raise ConfigError(f"{source}: {exc}") from exc


def loads(text: str, *, context: dict[str, Any] | None = None, source: str = "<string>") -> dict[str, Any]:
    """Render and parse HCL text."""
    text = render(text, context=context, source=source)
    try:
        return hcl2.loads(text)
    except Exception as exc:
        raise ConfigError(f"{source}: {exc}") from exc


def load(file: str | Path, *, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """Load and parse a single HCL file."""
    file = Path(file)
    logger.debug("Loading %s", file)
    try:
        text = file.read_text()
    except OSError as exc:
        raise ConfigError(f"{file}: {exc.strerror}") from exc
    return loads(text, context=context, source=str(file))


def load_resource(name: str, *, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """Load an HCL document bundled with the shimmake package."""
    text = resources.files(__package__).joinpath(name).read_text()
    return loads(text, context=context, source=name)
