from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite:///./signingconnect.sqlite"
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "https://signingconnect-production.up.railway.app",
    ]

    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    token_ttl_days: int = 7
    reset_token_ttl_seconds: int = 3600  # 1 hour
    min_password_length: int = 8
    temp_password_length: int = 12

    # Fixed windows, keyed by client address.
    rate_limit_enabled: bool = True
    auth_rate_limit: str = "5/15 minutes"
    application_rate_limit: str = "3/hour"

    application_id_prefix: str = "SC"
    document_retention_days: int = 2555  # 7 years
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    model_config = {
        "env_prefix": "SIGNINGCONNECT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
