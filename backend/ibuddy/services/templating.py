"""
HTML helpers for email templates and bulk email: sanitizing (nh3) and
{{ variable }} placeholders filled from mentee fields.
"""
import html
import re

import nh3

from ibuddy.models.mentee import Mentee

# Placeholder name -> Mentee attribute
ALLOWED_VARIABLES: dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "gender": "gender",
    "degree": "degree",
}

_PLACEHOLDER = re.compile(r"{{\s*([\w.]+)\s*}}")
_TAG = re.compile(r"<[^>]+>")


def sanitize_html(body: str) -> str:
    return nh3.clean(body or "")


def is_empty_html(body: str) -> bool:
    return _TAG.sub("", body or "").strip() == ""


def find_variables(body: str) -> list[str]:
    """Placeholder names in order of first appearance."""
    seen: dict[str, None] = {}
    for name in _PLACEHOLDER.findall(body or ""):
        seen.setdefault(name, None)
    return list(seen)


def unknown_variables(names: list[str]) -> list[str]:
    return [n for n in names if n not in ALLOWED_VARIABLES]


def resolve_body(body: str, recipient: Mentee) -> str:
    """Replace allowed placeholders with the recipient's (HTML-escaped) values."""

    def _sub(match: re.Match) -> str:
        attr = ALLOWED_VARIABLES.get(match.group(1))
        if attr is None:
            return match.group(0)
        return html.escape(str(getattr(recipient, attr)))

    return _PLACEHOLDER.sub(_sub, body)
