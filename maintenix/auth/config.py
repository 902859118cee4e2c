# maintenix/auth/config.py
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    ALLOWED_SIGNUP_DOMAINS: str = "maintenix.com,company.com"
    BCRYPT_ROUNDS: int = 12

    @field_validator("BCRYPT_ROUNDS")
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @property
    def allowed_domains(self) -> list[str]:
        return [
            domain.strip().lower()
            for domain in self.ALLOWED_SIGNUP_DOMAINS.split(",")
            if domain.strip()
        ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
