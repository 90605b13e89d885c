from pydantic import BaseModel
from typing import Optional
from dotenv import load_dotenv
import os

# Values in a local .env take effect before the defaults below are read.
load_dotenv()


class Settings(BaseModel):
    APP_ENV: str = os.getenv("APP_ENV", "dev")
    FUELFLEX_DATABASE_URL: str = os.getenv("FUELFLEX_DATABASE_URL", "sqlite:///./db.sqlite3")
    FUELFLEX_FRONTEND_ORIGIN: str = os.getenv("FUELFLEX_FRONTEND_ORIGIN", "http://localhost:9002")
    FUELFLEX_LOG_LEVEL: str = os.getenv("FUELFLEX_LOG_LEVEL", "INFO")

    # External services; each one is optional and falls back to a local provider.
    GOOGLE_MAPS_API_KEY: Optional[str] = os.getenv("GOOGLE_MAPS_API_KEY") or None
    GOOGLE_GENAI_API_KEY: Optional[str] = os.getenv("GOOGLE_GENAI_API_KEY") or None
    FUELFLEX_GENAI_MODEL: str = os.getenv("FUELFLEX_GENAI_MODEL", "gemini-2.0-flash")
    FUELFLEX_FUEL_PRICE_URL: Optional[str] = os.getenv("FUELFLEX_FUEL_PRICE_URL") or None

    # Mock fuel market and travel-time assumptions
    FUELFLEX_FUEL_BASE_PRICE: float = float(os.getenv("FUELFLEX_FUEL_BASE_PRICE", "95.0"))
    FUELFLEX_FUEL_JITTER: float = float(os.getenv("FUELFLEX_FUEL_JITTER", "4.0"))
    FUELFLEX_CURRENCY: str = os.getenv("FUELFLEX_CURRENCY", "INR")
    FUELFLEX_AVG_SPEED_KMH: float = float(os.getenv("FUELFLEX_AVG_SPEED_KMH", "50"))

    FUELFLEX_PROVIDER_TIMEOUT_S: float = float(os.getenv("FUELFLEX_PROVIDER_TIMEOUT_S", "5"))
    FUELFLEX_EXPLAIN_TIMEOUT_S: float = float(os.getenv("FUELFLEX_EXPLAIN_TIMEOUT_S", "10"))

settings = Settings()
