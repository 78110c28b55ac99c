"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults for local development

Collaborators:
  - api/main.py: reads settings for CORS, body limits and startup checks
  - container.py: reads settings for storage, queue and lifecycle policy
  - identity/auth_users.py: reads JWT settings
  - crosscutting/logger.py: reads log level/format

Constraints:
  - Lives in API/infrastructure layer, NOT in domain/application
  - No business logic — pure configuration

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache for performance
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_MB = 1024 * 1024


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string
        app_env: Application environment (development/test/production)
        allowed_origins: Comma-separated CORS origins
        log_level: Root log level (default: INFO)
        log_json: Emit JSON logs (default: True)
        max_body_bytes: Max request body size (default: 55MB, above upload limit)
        metrics_require_auth: Require admin auth for /metrics (default: False)
        cors_allow_credentials: Allow cookies cross-origin (default: False)
        jwt_secret: Secret for signing JWT access tokens
        jwt_access_ttl_minutes: Access token TTL in minutes
        jwt_cookie_name: Cookie name for access token
        jwt_cookie_secure: Set Secure on auth cookies
        s3_endpoint_url: S3/MinIO endpoint URL (optional)
        s3_bucket: S3 bucket name (single bucket, workspace prefix per key)
        s3_access_key: S3 access key ID
        s3_secret_key: S3 secret access key
        s3_region: S3 region (optional)
        max_upload_bytes: Maximum upload size in bytes (default: 50MB)
        download_url_ttl_seconds: Default presigned URL TTL (default: 3600)
        download_url_max_ttl_seconds: Max presigned URL TTL (default: 86400)
        redis_url: Redis connection string for the activity queue (optional)
        activity_queue_name: RQ queue for activity records
        document_transition_policy: canonical | extended
    """

    # Required (no defaults)
    database_url: str

    # Environment
    app_env: str = "development"

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Redis / activity queue
    redis_url: str = ""
    activity_queue_name: str = "activity"
    activity_job_timeout_seconds: int = 60
    activity_job_retries: int = 3

    # Security - Hardening
    max_body_bytes: int = 55 * _MB
    metrics_require_auth: bool = False
    cors_allow_credentials: bool = False

    # Security - JWT Auth
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = 30
    jwt_cookie_name: str = "access_token"
    jwt_cookie_secure: bool = False

    # Storage - S3/MinIO
    s3_endpoint_url: str = ""
    s3_bucket: str = ""
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_region: str = ""
    max_upload_bytes: int = 50 * _MB
    download_url_ttl_seconds: int = 3600
    download_url_max_ttl_seconds: int = 86400

    # Document lifecycle
    document_transition_policy: str = "canonical"

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Retry/Resilience
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 30.0

    # Dev Tools (Backend Safe)
    dev_seed_admin: bool = False
    dev_seed_admin_email: str = "admin@local"
    dev_seed_admin_password: str = "admin"
    dev_seed_admin_full_name: str = "Administrador"
    dev_seed_admin_force_reset: bool = False

    @field_validator("document_transition_policy")
    @classmethod
    def transition_policy_valid(cls, v: str) -> str:
        policy = (v or "canonical").strip().lower()
        if policy not in {"canonical", "extended"}:
            raise ValueError("document_transition_policy must be canonical or extended")
        return policy

    @field_validator("max_upload_bytes", "max_body_bytes")
    @classmethod
    def size_limits_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("size limits must be greater than 0")
        return v

    @field_validator("download_url_ttl_seconds", "download_url_max_ttl_seconds")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("download URL TTL must be greater than 0")
        return v

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def storage_configured(self) -> bool:
        return bool(self.s3_bucket and self.s3_access_key and self.s3_secret_key)

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        insecure_secrets = {"dev-secret", "changeme", "change-me", "password"}
        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in insecure_secrets:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        if not self.jwt_cookie_secure:
            raise ValueError("JWT_COOKIE_SECURE must be true in production")
        if not self.metrics_require_auth:
            raise ValueError("METRICS_REQUIRE_AUTH must be true in production")
        if self.dev_seed_admin:
            raise ValueError("DEV_SEED_ADMIN must be disabled in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
