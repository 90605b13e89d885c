"""Error types raised by the price estimation pipeline.

Every failure carries the stage that produced it so the HTTP layer can tell
a rejected request ("invalid location") apart from a pricing outage
("unable to estimate price, try again").
"""

from typing import Optional


class EstimationError(Exception):
    code = "EstimationError"
    stage = "estimate"
    retryable = False
    status_code = 500
    user_message = "Unable to estimate price, please try again later."

    def __init__(self, message: str, *, cause: Optional[BaseException] = None, user_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if user_message is not None:
            self.user_message = user_message
        self.__cause__ = cause

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "stage": self.stage,
            "details": self.message,
            "retryable": self.retryable,
        }


class InvalidInput(EstimationError):
    """Bad coordinates or load weight. Never retried."""
    code = "InvalidInput"
    stage = "validate"
    status_code = 400
    user_message = "Invalid location or load details."


class FuelPriceUnavailable(EstimationError):
    code = "FuelPriceUnavailable"
    stage = "fuel_price"
    retryable = True
    status_code = 503


class DistanceUnavailable(EstimationError):
    code = "DistanceUnavailable"
    stage = "distance"
    retryable = True
    status_code = 503


class EstimationInconsistent(EstimationError):
    """The composed price is negative or not finite. Always a bug."""
    code = "EstimationInconsistent"
    stage = "compose"
    status_code = 500
