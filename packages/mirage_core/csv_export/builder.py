"""Accumulate CSV rows and write them atomically."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from .errors import CsvError


def _write_atomic(path: Path, data: bytes) -> None:
    """Write through a sibling temp file so readers never see a partial file."""
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


class CsvBuilder:
    """Header row plus preformatted row strings."""

    def __init__(self, header_row: str) -> None:
        self._header_row = header_row
        self._rows: list[str] = []

    def add_row(self, row: str | None) -> None:
        if row is not None:
            self._rows.append(row)

    @property
    def rows(self) -> list[str]:
        return list(self._rows)

    @property
    def text(self) -> str:
        return "\n".join([self._header_row, *self._rows])

    def save(self, path: str | Path, *, refcode: str) -> Path:
        """Write the CSV text to ``path``; raises ``CsvError`` on failure."""
        target = Path(path)
        data = self.text.encode("utf-8")
        try:
            _write_atomic(target, data)
        except OSError as exc:
            raise CsvError.save_to(target, size=len(data), error=exc, refcode=refcode) from exc
        return target

    def save_to_downloads_folder(
        self,
        filename: str,
        *,
        refcode: str,
        directory: str | Path | None = None,
    ) -> Path:
        """Write to ``filename`` inside the user's downloads folder, creating it if needed."""
        folder = Path(directory) if directory is not None else Path.home() / "Downloads"
        data = self.text.encode("utf-8")
        try:
            folder.mkdir(parents=True, exist_ok=True)
            target = folder / filename
            _write_atomic(target, data)
        except OSError as exc:
            raise CsvError.save_to_downloads_folder(
                filename, size=len(data), error=exc, refcode=refcode
            ) from exc
        return target
