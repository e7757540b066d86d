"""Request parameter validation and sanitization for oEmbed requests."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import unquote

from oembed_provider.core.constants import (
    DEFAULT_FORMAT,
    ERROR_MESSAGES,
    FORMATS,
    MAX_DIMENSION,
    MIN_DIMENSION,
    ErrorCode,
)

_INTEGER_RE = re.compile(r"^[+-]?[0-9]{1,10}$")


@dataclass(frozen=True)
class FieldError:
    """A single parameter validation failure."""

    field: str
    message: str
    code: ErrorCode


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate_params`.

    ``format`` is the format error responses should use: ``xml`` only when
    the caller asked for it, ``json`` otherwise.
    """

    errors: list[FieldError] = field(default_factory=list)
    format: str = DEFAULT_FORMAT

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> FieldError | None:
        return self.errors[0] if self.errors else None


@dataclass(frozen=True)
class SanitizedParams:
    """Decoded request parameters ready for the rest of the pipeline."""

    url: str | None
    format: str = DEFAULT_FORMAT
    maxwidth: int | None = None
    maxheight: int | None = None


def _parse_integer(value: object) -> int | None:
    """Parse a base-10 integer of at most ten ASCII digits, returning None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _INTEGER_RE.match(text):
        return None
    return int(text)


def _dimension_error(value: object, name: str, code: ErrorCode) -> FieldError | None:
    number = _parse_integer(value)
    if number is None or not (MIN_DIMENSION <= number <= MAX_DIMENSION):
        return FieldError(field=name, message=ERROR_MESSAGES[code], code=code)
    return None


def validate_params(query_params: Mapping[str, str] | None) -> ValidationResult:
    """
    Validate oEmbed query parameters.

    Every check runs; errors are reported in the order url, format,
    maxwidth, maxheight. Callers act on the first one.

    Args:
        query_params: Raw query string parameters. Unknown keys are ignored.

    Returns:
        ValidationResult listing every error found
    """
    params = query_params or {}
    errors: list[FieldError] = []

    if not params.get("url"):
        errors.append(
            FieldError("url", ERROR_MESSAGES[ErrorCode.MISSING_URL], ErrorCode.MISSING_URL)
        )

    requested_format = params.get("format") or DEFAULT_FORMAT
    if requested_format not in FORMATS:
        errors.append(
            FieldError("format", ERROR_MESSAGES[ErrorCode.INVALID_FORMAT], ErrorCode.INVALID_FORMAT)
        )

    if params.get("maxwidth") is not None:
        error = _dimension_error(params["maxwidth"], "maxwidth", ErrorCode.INVALID_MAXWIDTH)
        if error:
            errors.append(error)

    if params.get("maxheight") is not None:
        error = _dimension_error(params["maxheight"], "maxheight", ErrorCode.INVALID_MAXHEIGHT)
        if error:
            errors.append(error)

    return ValidationResult(
        errors=errors,
        format="xml" if requested_format == "xml" else DEFAULT_FORMAT,
    )


def _decode(value: str) -> str:
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def sanitize_params(query_params: Mapping[str, str] | None) -> SanitizedParams:
    """
    Percent-decode ``url``, ``maxwidth`` and ``maxheight`` and default ``format``.

    No range or shape checks happen here; run :func:`validate_params` first.
    A value that fails to decode is kept as-is, and a dimension that does
    not parse as an integer becomes None.
    """
    params = query_params or {}

    url = params.get("url")
    if url:
        url = _decode(str(url))

    maxwidth = params.get("maxwidth")
    maxheight = params.get("maxheight")

    return SanitizedParams(
        url=url or None,
        format=params.get("format") or DEFAULT_FORMAT,
        maxwidth=_parse_integer(_decode(str(maxwidth))) if maxwidth is not None else None,
        maxheight=_parse_integer(_decode(str(maxheight))) if maxheight is not None else None,
    )
