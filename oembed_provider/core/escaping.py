"""Escaping for XML text, HTML body text and HTML attribute values.

Substitutions are applied one after another on the already-substituted
string, so ``&`` must always come first.
"""

_XML_REPLACEMENTS = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)

_HTML_REPLACEMENTS = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)

_ATTRIBUTE_REPLACEMENTS = (
    ("&", "&amp;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)


def _replace_all(value: str, replacements: tuple[tuple[str, str], ...]) -> str:
    for char, entity in replacements:
        value = value.replace(char, entity)
    return value


def _coerce(value: object) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def escape_xml(value: object) -> str:
    """Escape a value for XML element text. ``None`` becomes an empty string."""
    return _replace_all(_coerce(value), _XML_REPLACEMENTS)


def escape_html(value: object) -> str:
    """Escape a value for HTML body text, including forward slashes."""
    return _replace_all(_coerce(value), _HTML_REPLACEMENTS)


def escape_attribute(value: object) -> str:
    """Escape a value for a double-quoted HTML attribute (URLs keep their slashes)."""
    return _replace_all(_coerce(value), _ATTRIBUTE_REPLACEMENTS)
