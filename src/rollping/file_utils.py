from __future__ import annotations

import os
import tempfile
from pathlib import Path


def publish_atomically(target: Path, data: bytes) -> Path:
    """
    Write ``data`` to ``target`` so that readers never see a partial file.

    The bytes go to a temporary file in the target's directory, are flushed
    to disk, and the temporary file is then renamed over ``target``. The
    temporary file is removed if any step fails.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.name}.", suffix=".part"
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return target
