"""Resolve a transaction to an HSA/FSA eligibility verdict.

Resolution runs in a fixed order and stops at the first tier that answers:

1. Merchant gate: a present MCC must name an eligible merchant category.
2. Catalog match: the first product whose SKU or UPC matches wins, with full confidence.
3. Estimator fallback: anything uncatalogued is sent to the estimator exactly once.
"""

import logging
from collections.abc import Callable
from typing import cast

from hsa_txn_classifier.catalogs import DEFAULT_CATALOGS, Catalogs
from hsa_txn_classifier.claude_client import EligibilityVerdict, Estimate
from hsa_txn_classifier.errors import EstimationFailure, FailureKind, MerchantIneligible
from hsa_txn_classifier.request_parser import TransactionRequest

logger = logging.getLogger(__name__)

CATALOG_MATCH_RATIONALE = "Matched in mock inventory list."

# (sku, upc, mcc, description) -> Estimate
Estimator = Callable[[str | None, str | None, str | None, str | None], Estimate]


class EligibilityResolver:
    def __init__(self, estimator: Estimator, catalogs: Catalogs = DEFAULT_CATALOGS) -> None:
        self.estimator = estimator
        self.catalogs = catalogs

    def resolve(self, request: TransactionRequest) -> EligibilityVerdict:
        """Classify a transaction.

        Raises MerchantIneligible when the merchant gate rejects, and
        EstimationFailure when the estimator cannot produce a verdict.
        """
        self._check_merchant(request.mcc)

        product = self.catalogs.find_product(request.sku, request.upc)
        if product is not None:
            logger.info("Matched product eligibility: id=%s, name=%s", product.id, product.name)
            return EligibilityVerdict(
                eligible=product.eligible,
                needs_lmn=product.needs_lmn,
                confidence_score=1.0,
                rationale=CATALOG_MATCH_RATIONALE,
            )

        logger.info("No catalog match for sku=%s upc=%s, falling back to estimator", request.sku, request.upc)
        estimate = self.estimator(request.sku, request.upc, request.mcc, request.txn_description)
        if not estimate.ok:
            kind = estimate.failure or FailureKind.MALFORMED_RESPONSE
            logger.error("Eligibility estimation failed: %s (%s)", kind, estimate.detail)
            raise EstimationFailure(kind, estimate.detail) from estimate.cause

        verdict = cast(EligibilityVerdict, estimate.verdict)
        logger.info("Estimated eligibility: %s", verdict)
        return verdict

    def _check_merchant(self, mcc: str | None) -> None:
        if not mcc:
            return
        category = self.catalogs.find_merchant_category(mcc)
        if category is None or not category.eligible:
            logger.warning("Merchant category %s is not eligible for HSA/FSA transactions", mcc)
            raise MerchantIneligible(mcc)
        logger.info("Merchant category %s accepted: %s", mcc, category.description)
