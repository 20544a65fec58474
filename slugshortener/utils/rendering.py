"""Jinja2 environment for the HTML surfaces (crawler previews and admin pages)"""

import functools
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape


@functools.cache
def template_environment() -> Environment:
    return Environment(
        loader=PackageLoader('slugshortener', 'templates'),
        autoescape=select_autoescape(['html']),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render(template_name: str, **context: Any) -> str:
    return template_environment().get_template(template_name).render(**context)
