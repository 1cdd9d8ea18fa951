"""Slug and identifier helpers shared by the build stages."""

import re
from unicodedata import normalize

from pymdownx.slugs import slugify as _md_slugify

_slugify_lower = _md_slugify(case="lower", separator="-")

_REPEATED_SEPARATORS = re.compile(r"-{2,}")
_DATED_NAME = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})-(?P<name>.+)$")


def slugify(text: str, max_len: int = 60) -> str:
    """Turn a title or category into a lowercase ASCII path segment.

    Accents are transliterated before pymdownx slugs the text. Text with
    nothing sluggable left becomes ``"post"``.

    >>> slugify("Hello World!")
    'hello-world'
    >>> slugify("Café à Paris")
    'cafe-a-paris'
    >>> slugify("C++ & Rust", max_len=3)
    'c-r'
    """
    ascii_text = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    segment = _REPEATED_SEPARATORS.sub("-", _slugify_lower(ascii_text, sep="-")).strip("-") or "post"
    return segment[:max_len].rstrip("-")


def split_dated_name(identifier: str) -> tuple[str, str, str, str] | None:
    """Split a Jekyll-style ``YYYY-MM-DD-name`` basename into its parts.

    Only the last path segment of ``identifier`` is inspected.

    >>> split_dated_name("notes/2020-01-31-hello")
    ('2020', '01', '31', 'hello')
    >>> split_dated_name("about") is None
    True
    """
    basename = identifier.rsplit("/", 1)[-1]
    match = _DATED_NAME.match(basename)
    if match is None:
        return None
    return match["year"], match["month"], match["day"], match["name"]
