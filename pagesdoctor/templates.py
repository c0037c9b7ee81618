"""File contents written by the auto-fix actions."""

from __future__ import annotations

import html
from typing import Optional

import yaml

DEFAULT_THEME = "jekyll-theme-minimal"
DEFAULT_PAGE_TAGLINE = "Your GitHub Pages site is now live!"
DEFAULT_SITE_DESCRIPTION = "A GitHub Pages site"

_INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{name}</title>
</head>
<body>
  <h1>Welcome to {name}</h1>
  <p>{tagline}</p>
</body>
</html>"""

_JEKYLL_CONFIG_HEADER = "# Jekyll configuration\n"


def render_index_html(name: str, description: Optional[str]) -> str:
    return _INDEX_HTML.format(
        name=html.escape(name),
        tagline=html.escape(description or DEFAULT_PAGE_TAGLINE),
    )


def render_jekyll_config(name: str, description: Optional[str]) -> str:
    """Return a `_config.yml` body; values are quoted by PyYAML where needed."""
    settings = {
        "title": name,
        "description": description or DEFAULT_SITE_DESCRIPTION,
        "theme": DEFAULT_THEME,
    }
    body = yaml.safe_dump(
        settings,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=float("inf"),
    )
    return _JEKYLL_CONFIG_HEADER + body


__all__ = [
    "DEFAULT_SITE_DESCRIPTION",
    "DEFAULT_PAGE_TAGLINE",
    "DEFAULT_THEME",
    "render_index_html",
    "render_jekyll_config",
]
