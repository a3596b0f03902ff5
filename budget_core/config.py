"""Environment-driven settings for the household budget tracker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .exceptions import ValidationError
from .validators import validate_fiscal_start_month

ENV_PREFIX = "BUDGET_TRACKER_"
DEFAULT_FISCAL_START_MONTH = 4
LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class Settings:
    fiscal_start_month: int = DEFAULT_FISCAL_START_MONTH
    env: str = "prod"
    allowed_origins: List[str] = field(default_factory=list)
    snapshot_path: Optional[Path] = None
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.env in {"dev", "development"}

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        fiscal_start_month: Optional[int] = None,
    ) -> "Settings":
        """Build settings from ``BUDGET_TRACKER_*`` variables, falling back to defaults.

        An explicit ``fiscal_start_month`` wins and the environment value is not read.
        """
        environ = os.environ if environ is None else environ

        def read(name: str) -> Optional[str]:
            value = environ.get(ENV_PREFIX + name)
            if value is None or not value.strip():
                return None
            return value.strip()

        if fiscal_start_month is not None:
            fiscal_start_month = validate_fiscal_start_month(fiscal_start_month)
        else:
            raw_month = read("FISCAL_START_MONTH")
            fiscal_start_month = (
                validate_fiscal_start_month(raw_month, ENV_PREFIX + "FISCAL_START_MONTH")
                if raw_month is not None
                else DEFAULT_FISCAL_START_MONTH
            )

        origins = read("ALLOWED_ORIGINS")
        snapshot = read("SNAPSHOT")
        log_level = (read("LOG_LEVEL") or "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ValidationError(
                f"{ENV_PREFIX}LOG_LEVEL must be one of: {', '.join(sorted(LOG_LEVELS))}"
            )

        return cls(
            fiscal_start_month=fiscal_start_month,
            env=(read("ENV") or "prod").lower(),
            allowed_origins=[
                origin.strip() for origin in (origins or "").split(",") if origin.strip()
            ],
            snapshot_path=Path(snapshot) if snapshot else None,
            log_level=log_level,
        )
