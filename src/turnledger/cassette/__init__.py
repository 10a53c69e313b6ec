from .fingerprint import hash_payload, make_fingerprint, make_judge_fingerprint, make_simulation_fingerprint
from .loader import load_record
from .models import CassetteRecord, CassetteSource
from .resolver import CassetteResolver
from .store import CassetteStore
from .writer import write_record

__all__ = [
    "CassetteRecord",
    "CassetteResolver",
    "CassetteSource",
    "CassetteStore",
    "hash_payload",
    "load_record",
    "make_fingerprint",
    "make_judge_fingerprint",
    "make_simulation_fingerprint",
    "write_record",
]
