"""Parse API Gateway request bodies into transaction requests."""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any

from hsa_txn_classifier.errors import MalformedRequest

logger = logging.getLogger(__name__)


@dataclass
class TransactionRequest:
    merchant_name: str | None = None
    txn_amount: float | None = None
    txn_description: str | None = None
    mcc: str | None = None
    sku: str | None = None
    upc: str | None = None

    def to_log_dict(self) -> dict[str, object]:
        return {
            "merchantName": self.merchant_name,
            "txnAmount": self.txn_amount,
            "txnDescription": self.txn_description,
            "mcc": self.mcc,
            "sku": self.sku,
            "upc": self.upc,
        }


def parse_api_event(event: dict[str, Any]) -> TransactionRequest:
    """Parse the body of an API Gateway proxy event."""
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise MalformedRequest(f"Invalid request body: {e}") from e
    return parse_transaction_request(body)


def parse_transaction_request(body: str | None) -> TransactionRequest:
    """Parse a JSON request body.

    Only a missing or unparsable body is rejected. Fields of the wrong type are
    logged and dropped (or converted where the intent is clear).
    """
    if body is None or not body.strip():
        raise MalformedRequest("Request body is required")

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise MalformedRequest(f"Invalid request body: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedRequest("Invalid request body: expected a JSON object")

    return TransactionRequest(
        merchant_name=_optional_text(payload, "merchantName"),
        txn_amount=_optional_amount(payload, "txnAmount"),
        txn_description=_optional_text(payload, "txnDescription"),
        mcc=_optional_identifier(payload, "mcc"),
        sku=_optional_identifier(payload, "sku"),
        upc=_optional_identifier(payload, "upc"),
    )


def _optional_text(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None or isinstance(value, str):
        return value
    logger.warning("Converting non-string %s to text: %r", key, value)
    return str(value)


def _optional_identifier(payload: dict[str, Any], key: str) -> str | None:
    """Identifiers are compared as strings; integer codes such as 5912 are accepted."""
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, str | int):
        logger.warning("Ignoring %s with unsupported type %s", key, type(value).__name__)
        return None
    return str(value).strip() or None


def _optional_amount(payload: dict[str, Any], key: str) -> float | None:
    """Amounts may arrive as numbers or numeric strings such as "49.99"."""
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        logger.warning("Ignoring %s with unsupported type %s", key, type(value).__name__)
        return None
    try:
        return float(value)
    except (ValueError, OverflowError):
        logger.warning("Ignoring unparsable %s: %r", key, value)
        return None
