# maintenix/password_reset/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class PasswordResetSettings(BaseSettings):
    OTP_EXPIRE_MINUTES: int = 10
    PASSWORD_MIN_LENGTH: int = 6
    MAX_REQUESTS_PER_HOUR: int = 5
    MAX_VERIFICATION_ATTEMPTS: int = 5
    RATE_LIMIT_WINDOW_MINUTES: int = 60
    VERIFICATION_WINDOW_MINUTES: int = 15
    # False answers unknown emails exactly like known ones
    REVEAL_UNKNOWN_EMAIL: bool = True
    RETENTION_HOURS: int = 24

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
