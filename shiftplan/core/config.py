from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(7, alias="REFRESH_TOKEN_EXPIRE_DAYS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    # Leave whose end_date precedes start_date is rejected when True
    leave_require_ordered_dates: bool = Field(True, alias="LEAVE_REQUIRE_ORDERED_DATES")
    # Rejected leaves keep occupying their days on the calendar when True
    calendar_show_rejected_leaves: bool = Field(False, alias="CALENDAR_SHOW_REJECTED_LEAVES")
    # Equal weekoff_1/weekoff_2 is rejected when True, only logged when False
    schedule_require_distinct_weekoffs: bool = Field(False, alias="SCHEDULE_REQUIRE_DISTINCT_WEEKOFFS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
