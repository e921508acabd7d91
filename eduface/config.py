"""Application configuration using Pydantic Settings."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "EduFace Attendance"
    college_name: str = "Tech Institute of Science"
    debug: bool = False

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "eduface"

    # JWT
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 30

    # Seeded administrator
    admin_email: str = "admin@college.edu"
    admin_password: str = "admin"
    admin_full_name: str = "Campus Admin"

    # AWS S3 (reference photos)
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "ap-south-1"
    s3_bucket_faces: str = "eduface-face-images"

    # Gemini face comparison; empty key switches to the demo oracle
    gemini_api_key: str = ""
    gemini_model: str = "gemini-3-flash-preview"

    # Check-in policy
    verification_match_threshold: float = 80.0
    verification_timeout_seconds: float = 30.0
    open_candidate_limit: int = 3
    session_fallback_to_first: bool = True
    campus_timezone: str = "UTC"
    checkin_session_ttl_seconds: int = 600

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _validate_production_secrets(self):
        if not self.debug:
            if self.jwt_secret_key in ("change-me-in-production", ""):
                raise ValueError(
                    "JWT_SECRET_KEY must be set to a strong secret when DEBUG is not enabled. "
                    "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
                )
        return self

    @model_validator(mode="after")
    def _validate_checkin_policy(self):
        if self.open_candidate_limit < 1:
            raise ValueError("OPEN_CANDIDATE_LIMIT must be at least 1")
        if not 0 <= self.verification_match_threshold <= 100:
            raise ValueError("VERIFICATION_MATCH_THRESHOLD must be between 0 and 100")
        if self.verification_timeout_seconds <= 0:
            raise ValueError("VERIFICATION_TIMEOUT_SECONDS must be positive")
        return self


settings = Settings()
