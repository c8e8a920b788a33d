"""Wompi integrity signatures.

Two keyed SHA-256 constructions are used with the gateway:

* Checkout integrity: ``sha256(reference + amount_in_cents + currency + integrity_secret)``.
  The widget forwards it to Wompi, which recomputes it to trust the amount.
* Event checksum: ``sha256(<values of signature.properties> + timestamp + events_secret)``,
  where each property is a dotted path resolved against the event ``data`` object
  (e.g. ``transaction.id``, ``transaction.status``).

Both are plain functions over their inputs so they can be recomputed in tests.
"""

import hashlib
import hmac
import logging
from typing import Any, Iterable, Mapping

from core.config import GatewayConfig
from core.errors import InvalidSignatureError

logger = logging.getLogger(__name__)

_MISSING = object()


def _sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def integrity_signature(reference: str, amount_in_cents: int, currency: str, secret: str) -> str:
    return _sha256_hex(f"{reference}{amount_in_cents}{currency}{secret}")


def resolve_property(document: Any, path: str) -> Any:
    """Walk ``path`` ("a.b.c") through nested mappings; None when any step is absent."""
    current = document
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key, _MISSING)
        if current is _MISSING:
            return None
    return current


def _stringify(value: Any) -> str:
    # Match the sender's JSON-to-string conversion
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def event_checksum(data: Mapping[str, Any], properties: Iterable[str], timestamp: Any, secret: str) -> str:
    """Checksum for an event payload.

    Raises:
        InvalidSignatureError: a listed property is absent or null in ``data``.
    """
    parts = []
    for path in properties:
        value = resolve_property(data, path)
        if value is None:
            raise InvalidSignatureError(f"Signed property {path!r} missing from event")
        parts.append(_stringify(value))
    parts.append(_stringify(timestamp))
    parts.append(secret)
    return _sha256_hex("".join(parts))


def verify_event_signature(envelope: Mapping[str, Any], config: GatewayConfig) -> None:
    """Verify a webhook envelope, failing closed.

    With no events secret configured this raises unless verification has been
    explicitly disabled, in which case every call logs a warning.

    Raises:
        InvalidSignatureError: the envelope is not authentic or cannot be checked.
    """
    if not config.events_secret:
        if config.verification_disabled:
            logger.warning("Webhook signature verification is DISABLED; accepting unverified event")
            return
        raise InvalidSignatureError("Webhook events secret is not configured")

    signature = envelope.get("signature") if isinstance(envelope, Mapping) else None
    if not isinstance(signature, Mapping):
        raise InvalidSignatureError("Missing signature block")

    checksum = signature.get("checksum")
    properties = signature.get("properties")
    timestamp = envelope.get("timestamp")
    if not checksum or not properties or timestamp is None:
        raise InvalidSignatureError("Incomplete signature: checksum, properties and timestamp are required")
    if not isinstance(checksum, str) or not isinstance(properties, list):
        raise InvalidSignatureError("Malformed signature block")

    data = envelope.get("data")
    if not isinstance(data, Mapping):
        raise InvalidSignatureError("Missing event data")

    expected = event_checksum(data, properties, timestamp, config.events_secret)
    if not hmac.compare_digest(expected.encode("utf-8"), checksum.encode("utf-8")):
        raise InvalidSignatureError("Checksum mismatch")
