"""
Helpers for assembling SQL text from static configuration.

Only identifiers that come from code-level configuration (the catalog
registry, association configs) may be passed through `quote_ident`. Anything
a caller supplies must travel as a bound parameter ($1, $2, ...).
"""

from __future__ import annotations

import re

from .errors import ConfigurationError

_IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def check_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise ConfigurationError(f"Invalid SQL identifier in configuration: {name!r}")
    return name


def quote_ident(name: str) -> str:
    return f'"{check_identifier(name)}"'


def like_contains(term: str) -> str:
    """
    Build a `%term%` pattern where LIKE wildcards in `term` match literally.

    Statements using it must declare `ESCAPE '\\'`.
    """
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class Placeholders:
    """
    Hands out $1, $2, ... in order while collecting the bound values.
    """

    def __init__(self) -> None:
        self.args: list = []

    def bind(self, value) -> str:
        self.args.append(value)
        return f"${len(self.args)}"
