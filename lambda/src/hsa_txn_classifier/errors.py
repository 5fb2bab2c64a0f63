"""Errors raised while classifying a transaction."""

from enum import StrEnum


class FailureKind(StrEnum):
    REMOTE_UNAVAILABLE = "remote_unavailable"
    TIMEOUT = "timeout"
    MALFORMED_RESPONSE = "malformed_response"


class ClassificationError(Exception):
    """Base class for classification errors surfaced to the caller."""


class MalformedRequest(ClassificationError):
    """The inbound request body is missing or cannot be parsed."""


class MerchantIneligible(ClassificationError):
    """The merchant category code is not recognized as HSA/FSA-eligible."""

    def __init__(self, mcc: str) -> None:
        super().__init__(f"Merchant category {mcc} is not eligible for HSA/FSA transactions")
        self.mcc = mcc


class EstimationFailure(ClassificationError):
    """The fallback estimator could not produce a verdict."""

    def __init__(self, kind: FailureKind, detail: str) -> None:
        super().__init__(f"{kind}: {detail}")
        self.kind = kind
        self.detail = detail
