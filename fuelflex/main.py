# --- fuelflex/main.py --------------------------------------------------------
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .settings import settings
from .database import Base, engine
from . import models  # ensure models are loaded before create_all
from .errors import InvalidInput
from .pricing import error_response

PRICING_PATH = "/api/calculate-price"

logging.basicConfig(
    level=settings.FUELFLEX_LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="FuelFlex Transport API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FUELFLEX_FRONTEND_ORIGIN, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables on boot (dev convenience)
Base.metadata.create_all(bind=engine)


@app.exception_handler(RequestValidationError)
async def invalid_input_handler(request: Request, exc: RequestValidationError):
    # malformed requests get the same failure body as InvalidInput from the estimator
    user_message = None
    if not request.url.path.startswith(PRICING_PATH):
        user_message = "Invalid request, check the listed fields."
    err = InvalidInput("request failed validation", user_message=user_message)
    return error_response(err, settings.FUELFLEX_CURRENCY, details=jsonable_encoder(exc.errors()))


@app.get("/health")
def health():
    return {"ok": True, "env": settings.APP_ENV}

# Routers
from .pricing import router as pricing_router
from .bookings import router as bookings_router

app.include_router(pricing_router)
app.include_router(bookings_router)
