"""Canonical field names for Mirage log records.

The HTTP client binds the exchange fields for the duration of one request;
formatters emit the record and error fields on every line.
"""

# Record fields.
TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
CALL_SITE = "call_site"
FUNCTION = "function"

# One HTTP exchange.
REFCODE = "refcode"
REQUEST_ID = "request_id"
METHOD = "method"
URL = "url"

# Attached when a record carries a Mirage error.
ERROR_CODE = "error_code"
ERROR_KIND = "error_kind"
EXCEPTION = "exception"

# Seeded once by ``configure_logging``.
SERVICE = "service"
ENVIRONMENT = "environment"

EXCHANGE_FIELDS = (REFCODE, REQUEST_ID, METHOD, URL)
