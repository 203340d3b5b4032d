from __future__ import annotations
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from meal_plan_wizard.constants import DEPARTMENT_ORDER, is_valid_timezone


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    household_api_url: str = "http://localhost:3000"
    household_api_token: str = ""
    request_timeout: float = 30.0
    timezone: str = "UTC"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-opus-4-6"
    wizard_dir: Path = Path.home() / ".meal_plan_wizard"
    draft_ttl_hours: int = 24
    department_order: list[str] = list(DEPARTMENT_ORDER)
    system_prompt: str = (
        "You are a family meal planning assistant. You plan one dinner per day for a household's week, "
        "choosing ONLY from the household's own recipe list.\n\n"
        "Rules:\n"
        "1. Use the exact recipe ID shown in brackets for every meal you choose\n"
        "2. Include every recipe marked USER SELECTED somewhere in the week\n"
        "3. On days marked BUSY, prefer recipes rated Very Quick or Quick\n"
        "4. Avoid repeating a recipe within the same week\n"
        "5. Use recipes that yield leftovers before lighter days when it helps the schedule\n"
        "6. Respect the household's stated preferences\n\n"
        "Return ONLY JSON, with no prose around it."
    )

    @field_validator("timezone", mode="after")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        if not is_valid_timezone(v):
            raise ValueError(f"Unknown timezone '{v}'")
        return v

    @field_validator("household_api_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")
