"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./storefront.db"
    environment: str = "development"  # "production" turns on secure cookies
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Session cookie
    session_secret: str = "change-me-in-production"
    session_algorithm: str = "HS256"
    session_cookie_name: str = "user_id"
    session_max_age: int = 60 * 60 * 24 * 7  # one week, in seconds
    pending_cookie_name: str = "pending_2fa"
    pending_max_age: int = 5 * 60  # password accepted, waiting for the TOTP code

    # Credentials
    totp_issuer: str = "Clothing Store"
    bcrypt_rounds: int = 10

    model_config = {"env_prefix": "SF_", "env_file": ".env"}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
