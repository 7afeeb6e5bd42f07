import os
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

class Settings(BaseSettings):
    APP_ENV: str = "dev"
    API_VERSION: str = "v1.0.0"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # console | json

    # Question bank and curated rules, loaded once at startup
    QUESTION_BANK_PATH: str = os.path.join(DATA_DIR, "questions.yaml")
    TRIAGE_RULES_PATH: str = os.path.join(DATA_DIR, "triage_rules.yaml")

    # Referral collaborator. Keep the timeout short: referrals are best-effort.
    REFERRAL_BASE_URL: str = "http://localhost:3000"
    REFERRAL_CREATE_PATH: str = "/api/v1/referral/create"
    REFERRAL_TIMEOUT_SECONDS: float = 5.0
    REFERRAL_CONTACT_PREFERENCE: List[str] = ["phone", "in_person"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
