"""Sanitization of backend-supplied markup and display text."""

import re

from bs4 import BeautifulSoup, Comment, Tag

from oembed_provider.core.urls import sanitize_url

MAX_HTML_LENGTH = 10000
MAX_TEXT_LENGTH = 500

# Tags removed together with their subtree
_REMOVE_TAGS = {
    "script",
    "object",
    "embed",
    "applet",
    "form",
    "input",
    "textarea",
    "select",
    "button",
    "base",
    "meta",
    "link",
}

_EVENT_ATTR_RE = re.compile(r"^on\w+$", re.IGNORECASE)
_UNSAFE_SCHEME_RE = re.compile(r"^(javascript|vbscript|data):", re.IGNORECASE)
_CSS_EXPRESSION_RE = re.compile(r"expression\s*\(|javascript:", re.IGNORECASE)
_TEXT_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)
_INVISIBLE_RE = re.compile(r"[\x00-\x20\x7F]+")


def _unsafe_attr(name: str, value: object) -> bool:
    if _EVENT_ATTR_RE.match(name):
        return True
    text = " ".join(value) if isinstance(value, list) else str(value)
    if _UNSAFE_SCHEME_RE.match(_INVISIBLE_RE.sub("", text)):
        return True
    return name.lower() == "style" and bool(_CSS_EXPRESSION_RE.search(text))


def sanitize_html(html: str) -> str:
    """
    Strip active content from embed markup.

    Scripts, plugin and form elements are removed with their content, and
    iframes survive only with an http(s) ``src``. Event-handler attributes,
    ``javascript:``/``vbscript:``/``data:`` attribute values and CSS
    expressions are dropped. The result is capped at 10000 characters.
    """
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.find_all(_REMOVE_TAGS):
        # Nested matches are already gone with their ancestor
        if not tag.decomposed:
            tag.decompose()

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all("iframe"):
        if not tag.decomposed and not sanitize_url(tag.get("src")):
            tag.decompose()

    for tag in soup.find_all(True):
        if not isinstance(tag, Tag):
            continue
        unsafe = [name for name, value in tag.attrs.items() if _unsafe_attr(name, value)]
        for name in unsafe:
            del tag[name]

    return str(soup).strip()[:MAX_HTML_LENGTH]


def sanitize_text(text: str) -> str:
    """Reduce display text to plain text without markup, capped at 500 characters."""
    plain = BeautifulSoup(text, "html.parser").get_text()
    return _TEXT_SCHEME_RE.sub("", plain).strip()[:MAX_TEXT_LENGTH]
