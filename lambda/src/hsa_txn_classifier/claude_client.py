"""Claude API client for estimating HSA/FSA eligibility of uncatalogued products."""

import json
import logging
from dataclasses import dataclass

import anthropic
from anthropic.types import TextBlock

from hsa_txn_classifier.errors import FailureKind

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_TOKENS = 1024

SYSTEM_PROMPT = """\
You are an expert in HSA/FSA product eligibility. You analyze medical and wellness \
transactions by reviewing the merchant category code (MCC), UPC code, SKU number, and \
transaction description to determine step by step whether the transaction is eligible \
for HSA/FSA reimbursement, and whether a Letter of Medical Necessity (LMN) is required.

When providing a confidenceScore, use the following guidelines:
- 0.9 to 1.0: The product is clearly eligible or ineligible based on well-known HSA/FSA \
rules or is a common medical/healthcare item.
- 0.7 to 0.89: The product is likely eligible/ineligible, but there is some ambiguity or \
it is less common.
- 0.4 to 0.69: The product is uncommon or there is significant ambiguity, but some \
evidence exists for eligibility/ineligibility.
- 0.0 to 0.39: There is little to no evidence for eligibility/ineligibility, or the \
product is unrelated to HSA/FSA categories.

Respond with a JSON object containing exactly these fields:
- "eligible": boolean
- "needsLmn": boolean
- "confidenceScore": number between 0 and 1
- "rationale": string explaining your decision and confidence score

Respond ONLY with the JSON object, no other text."""

USER_PROMPT_TEMPLATE = """\
A customer is attempting to purchase a product with the following details:
SKU: {sku}
UPC: {upc}
Merchant Category Code (MCC): {mcc}
Transaction Description: {description}
Is this product likely to be eligible for HSA/FSA reimbursement?"""


@dataclass
class EligibilityVerdict:
    eligible: bool
    needs_lmn: bool
    confidence_score: float
    rationale: str

    def to_dict(self) -> dict[str, object]:
        return {
            "eligible": self.eligible,
            "needsLmn": self.needs_lmn,
            "confidenceScore": self.confidence_score,
            "rationale": self.rationale,
        }


@dataclass
class Estimate:
    """Outcome of one estimator call: a verdict, or the kind of failure that prevented one."""

    verdict: EligibilityVerdict | None = None
    failure: FailureKind | None = None
    detail: str = ""
    cause: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.verdict is not None


def estimate_eligibility(
    api_key: str,
    sku: str | None,
    upc: str | None,
    mcc: str | None,
    description: str | None,
    *,
    model: str = DEFAULT_MODEL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> Estimate:
    """Ask Claude whether a product is HSA/FSA-eligible.

    Makes a single request with no retries. Transport and parse failures are
    returned as a failed Estimate rather than a default verdict.
    """
    client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    prompt = USER_PROMPT_TEMPLATE.format(
        sku=sku or "unknown",
        upc=upc or "unknown",
        mcc=mcc or "unknown",
        description=description or "unknown",
    )

    logger.info("Calling Claude API: model=%s, sku=%s, upc=%s, mcc=%s", model, sku, upc, mcc)

    try:
        response = client.messages.create(
            model=model,
            max_tokens=max_tokens,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.APITimeoutError as e:
        logger.error("Claude API timed out after %.1fs", timeout)
        return Estimate(failure=FailureKind.TIMEOUT, detail=f"Claude API timed out after {timeout}s", cause=e)
    except (anthropic.APIConnectionError, anthropic.APIStatusError) as e:
        logger.error("Claude API unavailable: %s", e)
        return Estimate(failure=FailureKind.REMOTE_UNAVAILABLE, detail=str(e), cause=e)
    except anthropic.APIResponseValidationError as e:
        logger.error("Claude API response failed validation: %s", e)
        return Estimate(failure=FailureKind.MALFORMED_RESPONSE, detail=str(e), cause=e)

    logger.info("Claude API returned: stop_reason=%s, content_blocks=%d", response.stop_reason, len(response.content))

    response_text = ""
    for block in response.content:
        if isinstance(block, TextBlock):
            response_text = block.text
            break

    logger.info("Claude response: %s", response_text)

    if not response_text.strip():
        logger.error("Claude returned empty response. Stop reason: %s", response.stop_reason)
        return Estimate(failure=FailureKind.MALFORMED_RESPONSE, detail="Claude returned an empty response")

    stripped = _strip_code_fences(response_text)
    try:
        result = json.loads(stripped)
    except ValueError as e:
        return Estimate(
            failure=FailureKind.MALFORMED_RESPONSE,
            detail=f"Failed to parse Claude response: {response_text}",
            cause=e,
        )

    if not isinstance(result, dict):
        return Estimate(
            failure=FailureKind.MALFORMED_RESPONSE,
            detail=f"Expected a JSON object from Claude, got: {response_text}",
        )

    return Estimate(verdict=coerce_verdict(result))


def coerce_verdict(result: dict[str, object]) -> EligibilityVerdict:
    """Build a verdict from parsed model output, defaulting each bad field independently."""
    eligible = result.get("eligible")
    needs_lmn = result.get("needsLmn")
    rationale = result.get("rationale")

    return EligibilityVerdict(
        eligible=eligible if isinstance(eligible, bool) else False,
        needs_lmn=needs_lmn if isinstance(needs_lmn, bool) else False,
        confidence_score=_coerce_confidence(result.get("confidenceScore")),
        rationale=rationale if isinstance(rationale, str) else "",
    )


def _coerce_confidence(value: object) -> float:
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0.0
    if value != value:  # NaN
        return 0.0
    try:
        score = float(value)
    except OverflowError:
        return 0.0
    return min(max(score, 0.0), 1.0)


def _strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```), if present."""
    stripped = text.strip()
    if stripped.startswith("```"):
        lines = stripped.split("\n")
        lines = [line for line in lines[1:] if line.strip() != "```"]
        stripped = "\n".join(lines)
    return stripped
