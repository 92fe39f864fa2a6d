"""CSV export for Mirage core."""

from .builder import CsvBuilder
from .errors import CsvError

__all__ = ["CsvBuilder", "CsvError"]
