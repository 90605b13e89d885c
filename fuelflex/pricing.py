"""Price estimate routes.

``POST /api/calculate-price`` runs the estimator for one shipment. Failures
come back as a JSON body with ``error``/``stage``/``details`` and a zero
``estimatedPrice``, with a status that tells the caller whether to fix the
request (400), retry later (503) or report a bug (500).
"""

from functools import lru_cache
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .errors import EstimationError
from .estimator import PriceEstimate, PriceEstimator, PricingConfig, build_estimator
from .schemas import PriceRequest, PriceResponse
from .settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pricing"])


@lru_cache(maxsize=1)
def get_estimator() -> PriceEstimator:
    return build_estimator(PricingConfig.from_settings(settings))


def error_response(exc: EstimationError, currency: str, details=None) -> JSONResponse:
    """Failure body shared by every route; ``details`` replaces the exception message when given."""
    failed = PriceEstimate.failed(exc, currency)
    body = {
        **exc.to_dict(),
        "details": exc.message if details is None else details,
        "message": exc.user_message,
        "estimatedPrice": failed.estimated_price,
        "breakdown": failed.breakdown,
        "currency": currency,
    }
    return JSONResponse(status_code=exc.status_code, content=body)


@router.post("/calculate-price", response_model=PriceResponse)
async def calculate_price(payload: PriceRequest, estimator: PriceEstimator = Depends(get_estimator)):
    try:
        estimate = await estimator.estimate(payload.to_estimate_request())
    except EstimationError as e:
        logger.warning("Price estimation failed at %s: %s", e.stage, e.message)
        return error_response(e, estimator.config.currency)
    return PriceResponse.from_estimate(estimate)


@router.get("/calculate-price")
def calculate_price_usage():
    return {
        "message": "Send a POST request with a JSON body matching the schema below to get a price estimate.",
        "schema": PriceRequest.model_json_schema(by_alias=True),
    }
