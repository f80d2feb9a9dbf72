from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DetectionSettings(BaseSettings):
    """
    Policy constants for draft detection. Read from AUTOTEX_* environment
    variables or a local .env file.
    """

    model_config = SettingsConfigDict(env_prefix="AUTOTEX_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    draft_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    actionable_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    high_confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    merge_gap_lines: int = Field(default=2, ge=0)
    automatic_detection: bool = True
    manual_blocks: bool = True
    fence_token: str = Field(default="autotex", min_length=1, pattern=r"^\S+$")
    debounce_seconds: float = Field(default=0.3, ge=0.0)
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_thresholds(self) -> "DetectionSettings":
        if self.actionable_threshold < self.draft_threshold:
            raise ValueError("actionable_threshold must not be below draft_threshold")
        return self


@lru_cache(maxsize=1)
def get_settings() -> DetectionSettings:
    return DetectionSettings()
