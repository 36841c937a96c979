"""Fixed sampling tables used by the record generator."""

HTTP_METHODS = ["POST", "GET", "HEAD", "PUT"]

HTTP_VERSIONS = ["HTTP/1.1", "HTTP/2.0", "HTTP/3.0"]

STATUS_CODES = [
    200, 201, 204, 206, 301, 302, 304,
    400, 401, 403, 404, 408, 418, 429,
    500, 502, 503, 504,
]

PATH_SEGMENTS = [
    "game-api", "api", "v1", "v2", "profiles", "session",
    "items", "orders", "metrics", "events", "spin", "status",
]

HOST_PREFIXES = ["api", "edge", "host", "svc", "gateway", "ingress"]

# strftime("%b") follows the process locale
MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

TRACE_ID_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789"
)
TRACE_ID_LENGTH = 8

TERMINATION_STATE = "--"
