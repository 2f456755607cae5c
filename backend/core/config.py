import os
from typing import Literal
from dotenv import load_dotenv
import logging


logger = logging.getLogger(__name__)

# Load environment variables from .env file located in the parent directory
# Environment variables explicitly set (e.g., by Docker Compose) take precedence.
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ENV_PATH = os.path.join(BASE_DIR, '.env')
load_dotenv(ENV_PATH)


def parse_bool(value, default: bool = False) -> bool:
    """
    Parses boolean flags from the environment.
    Accepts "1", "true", "yes", "on" (any case) as True; "0", "false", "no", "off" as False.
    Anything else falls back to the default.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    logger.warning(f"Unrecognized boolean value {value!r}, using default {default}")
    return default


class Settings:
    # --- General Environment Settings ---
    # ENVIRONMENT determines application behavior (e.g., SQL echo, logging level).
    ENVIRONMENT: Literal["local", "staging",
                         "production"] = os.getenv('ENVIRONMENT', 'local')
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    # --- PostgreSQL Database Configuration ---
    # Defaults are set for local Docker Compose setup.
    POSTGRES_USER: str = os.getenv('POSTGRES_USER', 'reviews')
    POSTGRES_PASSWORD: str = os.getenv('POSTGRES_PASSWORD', 'reviews_password')
    POSTGRES_SERVER: str = os.getenv('POSTGRES_SERVER', 'postgres')
    POSTGRES_PORT: int = int(os.getenv('POSTGRES_PORT', 5432))
    POSTGRES_DB: str = os.getenv('POSTGRES_DB', 'reviews_db')

    # Full database URL. Takes precedence over the individual components when set.
    POSTGRES_DB_URL: str = os.getenv('POSTGRES_DB_URL', "")

    # --- Review Policy ---
    # Reviews backed by a completed order are published immediately.
    AUTO_APPROVE_VERIFIED_USERS: bool = parse_bool(
        os.getenv('AUTO_APPROVE_VERIFIED_USERS'), True)
    # Guest reviews always go through manual moderation unless this is switched on.
    AUTO_APPROVE_GUESTS: bool = parse_bool(
        os.getenv('AUTO_APPROVE_GUESTS'), False)
    # Only consulted by the "can this user review" check.
    REQUIRE_PURCHASE_FOR_REVIEW: bool = parse_bool(
        os.getenv('REQUIRE_PURCHASE_FOR_REVIEW'), False)
    # Run titles, bodies and guest names through the word-list filter.
    ENABLE_PROFANITY_FILTER: bool = parse_bool(
        os.getenv('ENABLE_PROFANITY_FILTER'), True)

    # --- Moderation ---
    # Maximum number of review ids accepted by a single bulk moderation call.
    REVIEW_BULK_LIMIT: int = int(os.getenv('REVIEW_BULK_LIMIT', 100))

    # --- Networking ---
    # Only enable behind a reverse proxy that overwrites X-Forwarded-For;
    # otherwise clients choose their own anonymous voter key.
    TRUST_PROXY_HEADERS: bool = parse_bool(
        os.getenv('TRUST_PROXY_HEADERS'), False)

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """
        Constructs the SQLAlchemy database URI.
        Prioritizes a full URL (POSTGRES_DB_URL) over individual components.
        """
        if self.POSTGRES_DB_URL:
            return self.POSTGRES_DB_URL

        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


# Instantiate the settings object to be used throughout the application
settings = Settings()
