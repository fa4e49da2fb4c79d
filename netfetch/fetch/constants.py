"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_REDIRECT_MIN = 300
HTTP_STATUS_REDIRECT_MAX = 400

# Status codes followed as redirects even before the Location header is read
REDIRECT_STATUS_CODES = frozenset({300, 301, 302, 303, 307, 308})

# Redirect limits
DEFAULT_MAX_REDIRECTS = 5

# Header names
HEADER_LOCATION = "Location"
HEADER_CONTENT_LENGTH = "Content-Length"

# Reported when the response carries no usable Content-Length
UNKNOWN_CONTENT_LENGTH = -1

# Schemes a redirect may point to
ALLOWED_REDIRECT_SCHEMES = frozenset({"http", "https"})

# Response Size Limits
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192
