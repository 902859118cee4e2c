# maintenix/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Maintenix"
    DATABASE_URL: str
    CORS_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class EmailSettings(BaseSettings):
    COMMUNICATION_SERVICES_CONNECTION_STRING: str | None = None
    SENDER_ADDRESS: str = "DoNotReply@maintenix.com"
    SENDER_DISPLAY_NAME: str = "MAINTENIX"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
