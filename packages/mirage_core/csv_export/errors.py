"""CSV export error type."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar

from packages.mirage_core.errors import codes
from packages.mirage_core.errors.types import ErrorKind, MirageError, error_dataclass
from packages.mirage_core.formatting import format_byte_count


@error_dataclass
class CsvError(MirageError):
    """CSV text could not be written to disk."""

    kind: ClassVar[ErrorKind] = ErrorKind.CSV
    default_alert_title: ClassVar[str | None] = "Mirage CSV Error"
    default_clarification: ClassVar[str | None] = "Couldn't save CSV file."

    @classmethod
    def save_to(cls, path: Path, *, size: int, error: BaseException, refcode: str) -> CsvError:
        return cls(
            code=codes.CSV_SAVE_FAILED,
            refcode=refcode,
            details=f"Failed to save {format_byte_count(size)} CSV file to '{path}'.",
            underlying_errors=(error,),
            user_info={"url": str(path)},
        )

    @classmethod
    def save_to_downloads_folder(
        cls, filename: str, *, size: int, error: BaseException, refcode: str
    ) -> CsvError:
        return cls(
            code=codes.CSV_SAVE_FAILED,
            refcode=refcode,
            details=(
                f"Failed to save {format_byte_count(size)} CSV file '{filename}' "
                "to the downloads folder."
            ),
            underlying_errors=(error,),
            user_info={"filename": filename},
        )
