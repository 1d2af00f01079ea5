"""Atomic writes for downloaded files."""

import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

log = logger.bind(stage="storage")


def atomic_write_stream(target: Path, chunks: Iterable[bytes]) -> Path:
    """Write chunks to target without ever exposing a partial file.

    Data goes to a temp file in the target's directory, which is renamed
    over target only after the last chunk is flushed. On any failure,
    including KeyboardInterrupt, the temp file is removed and whatever was
    at target before is left untouched.
    """
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp",
    )
    written = 0
    try:
        with os.fdopen(fd, "wb") as f:
            for chunk in chunks:
                f.write(chunk)
                written += len(chunk)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, target)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError as cleanup_err:
            log.warning(f"Failed to cleanup temp file {tmp_path}: {cleanup_err}")
        raise

    log.debug(f"Wrote {written} bytes to {target}")
    return target


def atomic_write_bytes(target: Path, data: bytes) -> Path:
    return atomic_write_stream(target, [data])
