"""Shared test fixtures for HSA/FSA transaction classifier tests."""

import os
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

# Set dummy AWS credentials so module-level boto3.client() calls don't fail during import.
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("SSM_API_KEY_PARAM", "/test/anthropic-api-key")

from hsa_txn_classifier.claude_client import EligibilityVerdict, Estimate


@pytest.fixture
def estimated_verdict() -> EligibilityVerdict:
    """A verdict as the estimator might return it for an uncatalogued item."""
    return EligibilityVerdict(
        eligible=True,
        needs_lmn=False,
        confidence_score=0.82,
        rationale="Acupuncture supplies are generally HSA/FSA-eligible.",
    )


@pytest.fixture
def make_estimator() -> Callable[..., MagicMock]:
    """Factory fixture for a stub estimator returning a fixed Estimate.

    Usage:
        estimator = make_estimator(verdict=some_verdict)
        estimator = make_estimator(failure=FailureKind.TIMEOUT, detail="timed out")
    """

    def _make(**estimate_fields: object) -> MagicMock:
        return MagicMock(return_value=Estimate(**estimate_fields))  # type: ignore[arg-type]

    return _make
