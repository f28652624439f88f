"""Configuration for the approval notifier.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Distribution lists themselves are not settings; they live in a JSON file whose
location is configured here (see `approval_notifier.notifications.recipients`).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGED_TEMPLATES_PATH = Path(__file__).parent / "templates"


class NotifierSettings(BaseSettings):
    """Settings for the notifier.

    Environment variables:
    - LOG_LEVEL                          (optional)
    - NOTIFIER_DISTRIBUTION_LISTS_PATH   (optional)
    - NOTIFIER_TEMPLATES_PATH            (optional)
    - NOTIFIER_MAIL_SENDER               (optional)
    - NOTIFIER_MAIL_TRANSPORT            (optional, "log" or "smtp")
    - NOTIFIER_SMTP_HOST / NOTIFIER_SMTP_PORT
    - NOTIFIER_MAIL_MAX_CONCURRENCY
    - NOTIFIER_MAIL_TIMEOUT_SECONDS

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `NotifierSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    distribution_lists_path: Path = Field(
        default=Path("config/distribution_lists.json"),
        validation_alias="NOTIFIER_DISTRIBUTION_LISTS_PATH",
        description="JSON file mapping category -> region -> email address",
    )
    templates_path: Path = Field(
        default=PACKAGED_TEMPLATES_PATH,
        validation_alias="NOTIFIER_TEMPLATES_PATH",
        description="Directory holding `<template_id>.html` email templates",
    )

    mail_sender: str = Field(
        default="no-reply@localhost",
        validation_alias="NOTIFIER_MAIL_SENDER",
        description="From address used for every notification",
    )
    mail_transport: Literal["log", "smtp"] = Field(
        default="log",
        validation_alias="NOTIFIER_MAIL_TRANSPORT",
        description=(
            "How rendered notifications leave the process. 'log' only writes them to the "
            "log, which is the safe default for local runs."
        ),
    )
    smtp_host: str = Field(default="localhost", validation_alias="NOTIFIER_SMTP_HOST")
    smtp_port: int = Field(default=25, validation_alias="NOTIFIER_SMTP_PORT", gt=0, le=65535)

    mail_max_concurrency: int = Field(
        default=4,
        validation_alias="NOTIFIER_MAIL_MAX_CONCURRENCY",
        description="Maximum number of notifications sent at the same time.",
        ge=1,
        le=64,
    )
    mail_timeout_seconds: float = Field(
        default=30.0,
        validation_alias="NOTIFIER_MAIL_TIMEOUT_SECONDS",
        description="Timeout applied to each individual send.",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_smtp_host(self) -> NotifierSettings:
        if self.mail_transport == "smtp" and not self.smtp_host.strip():
            raise ValueError("NOTIFIER_SMTP_HOST is required when NOTIFIER_MAIL_TRANSPORT=smtp")
        return self
