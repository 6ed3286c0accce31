"""
Application settings.

Values come from environment variables (a local ``.env`` file is loaded
first).  ``Settings.from_env()`` is called once by ``create_app`` and the
resulting object is stored on ``app.state.settings``.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _default_mongodb_url() -> str:
    """Build the connection string from DB_USER/DB_PASS when MONGODB_URL is unset"""
    url = os.getenv("MONGODB_URL")
    if url:
        return url

    user = os.getenv("DB_USER")
    password = os.getenv("DB_PASS")
    if user and password:
        host = os.getenv("DB_HOST", "cluster0.mongodb.net")
        return (
            f"mongodb+srv://{quote_plus(user)}:{quote_plus(password)}@{host}/"
            "?retryWrites=true&w=majority"
        )

    return "mongodb://localhost:27017"


@dataclass
class Settings:
    """Runtime configuration for the API process."""

    app_name: str = "ContestHub"
    app_version: str = "1.0.0"
    debug: bool = True
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:5173"
    api_prefix: str = ""
    port: int = 5000

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    database_name: str = "contestHubDB"
    use_transactions: bool = False

    # Bearer tokens
    access_token_secret: str = "change_me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Payment gateway
    payment_gateway: str = "stripe"
    stripe_secret_key: Optional[str] = None
    stripe_api_base: str = "https://api.stripe.com"
    payment_currency: str = "usd"

    extra_cors_origins: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            app_name=os.getenv("APP_NAME", "ContestHub"),
            app_version=os.getenv("APP_VERSION", "1.0.0"),
            debug=_env_bool("DEBUG", "true"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173"),
            api_prefix=os.getenv("API_PREFIX", ""),
            port=int(os.getenv("PORT", "5000")),
            mongodb_url=_default_mongodb_url(),
            database_name=os.getenv("DATABASE_NAME", "contestHubDB"),
            use_transactions=_env_bool("MONGODB_TRANSACTIONS", "false"),
            access_token_secret=os.getenv("ACCESS_TOKEN_SECRET", "change_me"),
            algorithm=os.getenv("ALGORITHM", "HS256"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            payment_gateway=os.getenv("PAYMENT_GATEWAY", "stripe"),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY"),
            stripe_api_base=os.getenv("STRIPE_API_BASE", "https://api.stripe.com"),
            payment_currency=os.getenv("PAYMENT_CURRENCY", "usd"),
            extra_cors_origins=[
                origin.strip()
                for origin in os.getenv("CORS_ORIGINS", "").split(",")
                if origin.strip()
            ],
        )

    @property
    def cors_origins(self) -> List[str]:
        return [
            self.frontend_url,
            "http://localhost:5173",
            "http://localhost:3000",
            *self.extra_cors_origins,
        ]
