"""Batch identifier generation.

Format: <PREFIX>-<epoch milliseconds>-<9 random base36 chars>, e.g.
PHARM-1760860800000-K3Z9QX01B. Nothing is checked against storage here;
the unique index on batches.qr_code is the final word on collisions.
"""
import secrets
import string
import time
from typing import Optional

from pharmatrace.core.config import settings

SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 9


def generate_qr_code(prefix: Optional[str] = None, now_ms: Optional[int] = None) -> str:
    """Return a fresh batch identifier. Cannot fail."""
    prefix = prefix or settings.QR_CODE_PREFIX
    timestamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{timestamp}-{suffix}"
