"""Stable machine-readable codes for Mirage errors.

Codes complement the ``ErrorKind`` tag: the kind names the failing subsystem,
the code names the specific failure within it.
"""

# URL construction
URL_MISSING_SCHEME = "URL_MISSING_SCHEME"
URL_MISSING_HOST = "URL_MISSING_HOST"
URL_INVALID = "URL_INVALID"

# JSON coding
JSON_ENCODE_FAILED = "JSON_ENCODE_FAILED"
JSON_DECODE_FAILED = "JSON_DECODE_FAILED"
JSON_NO_DATA = "JSON_NO_DATA"

# HTTP dispatch
HTTP_MISSING_URL = "HTTP_MISSING_URL"
HTTP_TRANSPORT_FAILURE = "HTTP_TRANSPORT_FAILURE"
HTTP_INVALID_RESPONSE = "HTTP_INVALID_RESPONSE"
HTTP_UNKNOWN_STATUS = "HTTP_UNKNOWN_STATUS"
HTTP_STATUS_FAILURE = "HTTP_STATUS_FAILURE"

# CSV export
CSV_SAVE_FAILED = "CSV_SAVE_FAILED"
