"""Lambda handler for classifying transactions as HSA/FSA-eligible (POST /classify).

Example request:
    curl -X POST https://<api-id>.execute-api.<region>.amazonaws.com/classify \\
      -H "Content-Type: application/json" \\
      -d '{"merchantName": "Wellness Pharmacy", "txnAmount": 49.99, "txnDescription": "Blood Pressure Monitor",
           "mcc": "5912", "sku": "1001", "upc": "10011001"}'
"""

import json
import logging
import os
from typing import Any

import boto3

from hsa_txn_classifier.claude_client import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    Estimate,
    estimate_eligibility,
)
from hsa_txn_classifier.errors import EstimationFailure, MalformedRequest, MerchantIneligible
from hsa_txn_classifier.request_parser import parse_api_event
from hsa_txn_classifier.resolver import EligibilityResolver, Estimator

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

SSM_API_KEY_PARAM = os.environ["SSM_API_KEY_PARAM"]
CLAUDE_MODEL = os.environ.get("CLAUDE_MODEL", DEFAULT_MODEL)
ESTIMATOR_TIMEOUT_SECONDS = float(os.environ.get("ESTIMATOR_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
ESTIMATOR_MAX_TOKENS = int(os.environ.get("ESTIMATOR_MAX_TOKENS", DEFAULT_MAX_TOKENS))

_ssm_cache: dict[str, str] = {}
_ssm_client = boto3.client("ssm")


def _get_ssm_param(name: str) -> str:
    """Fetch an SSM parameter, caching across invocations."""
    if name not in _ssm_cache:
        response = _ssm_client.get_parameter(Name=name, WithDecryption=True)
        _ssm_cache[name] = response["Parameter"]["Value"]
    return _ssm_cache[name]


def classify_transaction(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Classify the transaction in an API Gateway proxy event."""
    try:
        return _handle(event)
    except Exception:
        logger.exception("Failed to determine product eligibility")
        return _response(500, {"error": "Failed to determine product eligibility"})


def _handle(event: dict[str, Any]) -> dict[str, Any]:
    try:
        request = parse_api_event(event)
    except MalformedRequest as e:
        logger.warning("Rejected request: %s", e)
        return _response(400, {"error": str(e)})

    logger.info("Received transaction details: %s", request.to_log_dict())

    resolver = EligibilityResolver(estimator=_claude_estimator())
    try:
        verdict = resolver.resolve(request)
    except MerchantIneligible:
        return _response(400, {"error": "Merchant not eligible for HSA/FSA transactions"})
    except EstimationFailure as e:
        logger.error("Eligibility estimation failed: %s", e)
        return _response(500, {"error": "Eligibility estimation failed", "details": str(e)})

    logger.info("Eligibility check: %s for transaction: %s", verdict.to_dict(), request.to_log_dict())
    return _response(200, verdict.to_dict())


def _claude_estimator() -> Estimator:
    """Bind the configured API key, model and limits to the Claude estimator."""

    def estimate(sku: str | None, upc: str | None, mcc: str | None, description: str | None) -> Estimate:
        api_key = _get_ssm_param(SSM_API_KEY_PARAM)
        return estimate_eligibility(
            api_key,
            sku,
            upc,
            mcc,
            description,
            model=CLAUDE_MODEL,
            timeout=ESTIMATOR_TIMEOUT_SECONDS,
            max_tokens=ESTIMATOR_MAX_TOKENS,
        )

    return estimate


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }
