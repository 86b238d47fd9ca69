"""In-memory zip helpers for single-entry artifact archives."""

from __future__ import annotations

import io
import zipfile

OUTPUT_ENTRY_NAME = "output.json"


class SingleEntryError(ValueError):
    """The archive does not hold exactly one file."""

    def __init__(self, entry_count: int) -> None:
        super().__init__(f"archive contains {entry_count} entries")
        self.entry_count = entry_count


def read_single_entry(data: bytes) -> bytes:
    """
    Return the contents of the only file in a zip archive.

    Raises zipfile.BadZipFile when the bytes are not a zip archive and
    SingleEntryError when the archive holds zero or several files.
    """
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        entries = archive.infolist()
        if len(entries) != 1:
            raise SingleEntryError(len(entries))
        return archive.read(entries[0])


def build_single_entry(content: str | bytes, entry_name: str = OUTPUT_ENTRY_NAME) -> bytes:
    """Return the bytes of a deflated zip archive holding one file."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(entry_name, content)
    return buffer.getvalue()
