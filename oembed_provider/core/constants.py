"""oEmbed constants, defaults and the flat error taxonomy."""

from enum import Enum

OEMBED_VERSION = "1.0"

FORMATS = ("json", "xml")
DEFAULT_FORMAT = "json"

CONTENT_TYPES = ("photo", "video", "rich", "link")
FALLBACK_CONTENT_TYPE = "rich"

MIN_DIMENSION = 1
MAX_DIMENSION = 2048
MAX_URL_LENGTH = 2048

# Seconds
DEFAULT_CACHE_AGE = 3600
DEFAULT_CACHE_AGES = {
    "photo": 7200,
    "video": 3600,
    "rich": 1800,
    "link": 3600,
}
MAX_CACHE_AGE = 86400 * 7

# (width, height)
DEFAULT_DIMENSIONS = {
    "photo": (800, 600),
    "video": (640, 360),
    "rich": (500, 300),
    "widget": (400, 300),
    "gallery": (600, 400),
}

ALLOWED_SCHEMES = ("http", "https")
IFRAME_SANDBOX = "allow-scripts allow-same-origin allow-presentation"
IFRAME_ALLOW = "accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture"

CORS_ALLOW_ORIGIN = "*"
CORS_ALLOW_METHODS = "GET, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization"
CORS_MAX_AGE = 86400


class ErrorCode(str, Enum):
    """Error codes surfaced to oEmbed consumers."""

    MISSING_URL = "MISSING_URL"
    INVALID_URL = "INVALID_URL"
    MALFORMED_URL = "MALFORMED_URL"
    UNAUTHORIZED_DOMAIN = "UNAUTHORIZED_DOMAIN"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_MAXWIDTH = "INVALID_MAXWIDTH"
    INVALID_MAXHEIGHT = "INVALID_MAXHEIGHT"
    CONTENT_NOT_FOUND = "CONTENT_NOT_FOUND"
    BACKEND_ERROR = "BACKEND_ERROR"
    MISSING_PROVIDER_DOMAIN = "MISSING_PROVIDER_DOMAIN"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.MISSING_URL: "URL parameter is required",
    ErrorCode.INVALID_URL: "Invalid URL format",
    ErrorCode.MALFORMED_URL: "Invalid URL",
    ErrorCode.UNAUTHORIZED_DOMAIN: "Provider Domain Not Found",
    ErrorCode.INVALID_FORMAT: "Format not implemented",
    ErrorCode.INVALID_MAXWIDTH: "Maxwidth must be a number between 1 and 2048",
    ErrorCode.INVALID_MAXHEIGHT: "Maxheight must be a number between 1 and 2048",
    ErrorCode.CONTENT_NOT_FOUND: "Content not found",
    ErrorCode.BACKEND_ERROR: "Backend service error",
    ErrorCode.MISSING_PROVIDER_DOMAIN: "Provider domain not configured",
    ErrorCode.MISSING_REQUIRED_FIELD: "Required field missing for content type",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
}

ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.MISSING_URL: 400,
    ErrorCode.INVALID_URL: 400,
    ErrorCode.MALFORMED_URL: 400,
    ErrorCode.INVALID_MAXWIDTH: 400,
    ErrorCode.INVALID_MAXHEIGHT: 400,
    ErrorCode.INVALID_FORMAT: 501,
    ErrorCode.UNAUTHORIZED_DOMAIN: 404,
    ErrorCode.CONTENT_NOT_FOUND: 404,
    ErrorCode.MISSING_PROVIDER_DOMAIN: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Fallback codes when an error is formatted without an explicit code
STATUS_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    501: "NOT_IMPLEMENTED",
    500: "INTERNAL_SERVER_ERROR",
}
