from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Mapping

from turnledger.models import ProviderResult
from turnledger.util.canonical_json import canonicalize_json
from turnledger.util.redaction import redact

from .loader import load_record
from .models import CassetteRecord
from .writer import write_record

logger = logging.getLogger(__name__)

CASSETTE_SUFFIX = ".json"


def default_directory() -> Path:
    return Path.cwd() / "tests" / "cassettes"


class CassetteStore:
    """One JSON file per fingerprint under a single directory."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else default_directory()

    def path(self, fingerprint: str) -> Path:
        return self.directory / f"{fingerprint}{CASSETTE_SUFFIX}"

    def exists(self, fingerprint: str) -> bool:
        return self.path(fingerprint).is_file()

    def load(self, fingerprint: str) -> CassetteRecord:
        return load_record(self.path(fingerprint), fingerprint)

    def save(
        self,
        fingerprint: str,
        request: Mapping[str, Any],
        result: ProviderResult,
        meta: Mapping[str, Any] | None = None,
    ) -> CassetteRecord:
        record = CassetteRecord(
            fingerprint=fingerprint,
            request=redact(canonicalize_json(dict(request))),
            result=result,
            meta=dict(meta or {}),
        )
        path = self.path(fingerprint)
        write_record(path, record)
        logger.info("Recorded cassette %s", path)
        return record

    def iter_fingerprints(self) -> Iterator[str]:
        if not self.directory.is_dir():
            return
        for path in sorted(self.directory.glob(f"*{CASSETTE_SUFFIX}")):
            yield path.name[: -len(CASSETTE_SUFFIX)]
