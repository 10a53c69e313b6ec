from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from .models import CassetteRecord


def render_record(record: CassetteRecord) -> str:
    return json.dumps(record.to_document(), indent=2, ensure_ascii=False) + "\n"


def write_record(path: Path, record: CassetteRecord) -> None:
    """Write ``record`` to ``path`` atomically; concurrent writers leave one whole file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem[:12]}-", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(render_record(record))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
