"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class WorkflowConfig(BaseSettings):
    notify_window_minutes: int = 15
    block_on_open_standby: bool = True


class TimecardConfig(BaseSettings):
    overtime_threshold_hours: float = 8.0


class StandbyConfig(BaseSettings):
    hourly_rate: float = 189.00
    minimum_billable_hours: float = 1.0


class SmsConfig(BaseSettings):
    """Twilio credentials come from TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN / TWILIO_PHONE_NUMBER."""

    enabled: bool = True
    account_sid: str = ""
    auth_token: str = ""
    phone_number: str = ""
    api_base: str = "https://api.twilio.com/2010-04-01"
    timeout_seconds: float = 10.0
    company_name: str = "Pontifex Industries"

    model_config = SettingsConfigDict(env_prefix="TWILIO_")


class AuthConfig(BaseSettings):
    session_max_age_days: int = 7


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/fieldops.db"
    log_level: str = "INFO"
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    timecard: TimecardConfig = Field(default_factory=TimecardConfig)
    standby: StandbyConfig = Field(default_factory=StandbyConfig)
    sms: SmsConfig = Field(default_factory=SmsConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    wf = WorkflowConfig(**y.get("workflow", {}))
    tc = TimecardConfig(**y.get("timecard", {}))
    sb = StandbyConfig(**y.get("standby", {}))
    sms = SmsConfig(**y.get("sms", {}))
    auth = AuthConfig(**y.get("auth", {}))
    kwargs = {}
    db_url = y.get("database", {}).get("url")
    if db_url:
        kwargs["database_url"] = db_url
    if y.get("log_level"):
        kwargs["log_level"] = y["log_level"]
    return Settings(
        workflow=wf,
        timecard=tc,
        standby=sb,
        sms=sms,
        auth=auth,
        **kwargs,
    )
