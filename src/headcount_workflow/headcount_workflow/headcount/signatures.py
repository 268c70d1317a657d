"""Digital signature digests for headcount request resolutions."""

from __future__ import annotations

import hashlib
import hmac
from datetime import datetime

from ..common.datetime_utils import to_iso_timestamp
from ..core.constants import SIGNATURE_FIELD_SEPARATOR
from .model import Signature


def generate_signature_hash(signer_id: str, request_id: str, timestamp: datetime) -> str:
    """Hex SHA-256 of ``signer|request|timestamp`` (timestamp as ISO-8601 UTC, milliseconds)."""
    data = SIGNATURE_FIELD_SEPARATOR.join([str(signer_id), str(request_id), to_iso_timestamp(timestamp)])
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def verify_signature(signature: Signature) -> bool:
    """Recompute the digest from the stored fields and compare."""
    expected = generate_signature_hash(signature.signer_id, signature.request_id, signature.signed_at)
    return hmac.compare_digest(expected, signature.signature_hash)
