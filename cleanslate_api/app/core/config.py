"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so that
the service can start (and the test-suite can run) without any
environment at all.  In a production deployment you should override
these via environment variables or a dedicated configuration service.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Clean Slate API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    # Shared secret required to obtain an admin token from the token
    # endpoint.  When empty, admin tokens are only issued in debug mode.
    admin_secret: str = os.getenv("ADMIN_SECRET", "")

    # All money is held in integer minor units (cents) of this currency.
    currency: str = os.getenv("CURRENCY", "ZAR")

    # Hourly rate assigned to newly registered workers, in cents.
    default_hourly_rate_cents: int = int(os.getenv("DEFAULT_HOURLY_RATE_CENTS", "10000"))

    # Comma-separated ids of the catalog training modules that count as the
    # "initial training" onboarding step once completed.
    initial_training_module_ids: str = os.getenv("INITIAL_TRAINING_MODULE_IDS", "train002,train003")

    # Fraction of a booking's price paid out to the worker in payroll
    # figures.  ``1.0`` pays the full booking price.
    worker_payout_share: float = float(os.getenv("WORKER_PAYOUT_SHARE", "1.0"))

    # Default search radius for proximity matching, in kilometres.
    proximity_radius_km: float = float(os.getenv("PROXIMITY_RADIUS_KM", "25"))

    # Generative matching endpoint.  When empty the matching service falls
    # back to its local selection rule.
    matching_api_url: str = os.getenv("MATCHING_API_URL", "")
    matching_api_key: str = os.getenv("MATCHING_API_KEY", "")
    matching_timeout: float = float(os.getenv("MATCHING_TIMEOUT", "30"))

    # Paystack credentials.  Without a secret key payments are simulated
    # and always succeed with a test reference.
    paystack_secret_key: str = os.getenv("PAYSTACK_SECRET_KEY", "")
    paystack_base_url: str = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")

    # Populate a fresh store with demo workers, bookings and training
    # modules when the application is created.
    seed_demo_data: bool = os.getenv("SEED_DEMO_DATA", "true").lower() in {"1", "true", "yes"}

    @property
    def initial_training_ids(self) -> set[str]:
        return {m.strip() for m in self.initial_training_module_ids.split(",") if m.strip()}


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
