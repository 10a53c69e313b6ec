from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from turnledger.models import ProviderResult

from .store import CassetteStore

logger = logging.getLogger(__name__)


class CassetteResolver:
    """Read-through cassette cache with optional write-through.

    A stored cassette is always replayed, even when recording is disabled, so
    committed fixtures stay reproducible. A live result is persisted only when
    ``record`` is set. If the provider call raises, nothing is written.
    """

    def __init__(self, store: CassetteStore, record: bool = False) -> None:
        self.store = store
        self.record = record

    def resolve(
        self,
        fingerprint: str,
        call_provider: Callable[[], ProviderResult],
        build_request: Callable[[], Mapping[str, Any]],
        meta: Mapping[str, Any] | None = None,
    ) -> ProviderResult:
        if self.store.exists(fingerprint):
            logger.debug("Cassette hit %s", fingerprint)
            return self.store.load(fingerprint).result

        logger.debug("Cassette miss %s; calling provider", fingerprint)
        result = call_provider()

        if self.record:
            self.store.save(fingerprint, build_request(), result, meta)

        return result
