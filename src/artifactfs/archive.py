"""Zip export of the artifact store.

One archive entry per file record; the entry name is the record path with
the leading ``/`` removed, so ``/src/app.py`` lands at ``src/app.py``.
Folders are implied by entry names and never written as separate entries.
An empty store produces a valid, empty archive.
"""

from __future__ import annotations

import io
import zipfile
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from artifactfs.models import FileRecord

COMPRESSION_METHODS: dict[str, int] = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
    "bzip2": zipfile.ZIP_BZIP2,
    "lzma": zipfile.ZIP_LZMA,
}


def compression_method(name: str) -> int:
    try:
        return COMPRESSION_METHODS[name.lower()]
    except KeyError:
        msg = f"Unknown compression {name!r} (expected one of: {', '.join(COMPRESSION_METHODS)})"
        raise ValueError(msg) from None


def export_zip(
    records: Iterable[FileRecord],
    *,
    compression: str = "deflated",
    compresslevel: int | None = None,
) -> bytes:
    """Serialize records into zip bytes. Pure: reads records, touches nothing else."""
    method = compression_method(compression)
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=method, compresslevel=compresslevel) as zf:
        for record in sorted(records, key=lambda r: r.path):
            info = zipfile.ZipInfo(record.archive_name, date_time=_zip_time(record))
            info.compress_type = method
            info.external_attr = 0o644 << 16
            zf.writestr(info, record.content.encode("utf-8"), compresslevel=compresslevel)
    return buf.getvalue()


def write_zip(
    records: Iterable[FileRecord],
    dest: Path,
    *,
    compression: str = "deflated",
    compresslevel: int | None = None,
) -> int:
    """Write the archive to dest. Returns bytes written."""
    data = export_zip(records, compression=compression, compresslevel=compresslevel)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    return len(data)


def _zip_time(record: FileRecord) -> tuple[int, int, int, int, int, int]:
    ts = record.updated_at
    # Zip timestamps cannot predate 1980.
    if ts.year < 1980:
        return (1980, 1, 1, 0, 0, 0)
    return (ts.year, ts.month, ts.day, ts.hour, ts.minute, ts.second)
