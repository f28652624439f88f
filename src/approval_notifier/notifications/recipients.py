"""Distribution lists used by rules that notify a group rather than a person.

The file format is a JSON object keyed by category, each holding a region key to
email address mapping:

    {
      "region": {"north": "north-managers@example.org"},
      "planning": {"north": "north-planning@example.org"},
      "service-provider": {"north": "north-contractor@example.org"}
    }
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class DistributionCategory(str, Enum):
    REGION = "region"
    PLANNING = "planning"
    SERVICE_PROVIDER = "service-provider"


class ConfigLookupError(LookupError):
    def __init__(self, category: DistributionCategory, region: str) -> None:
        super().__init__(
            f"No '{category.value}' distribution address configured for region '{region}'"
        )
        self.category = category
        self.region = region


def _normalize_region(region: str) -> str:
    return region.strip().lower()


class RecipientConfig(BaseModel):
    """Read-only category -> region -> address lookup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    region: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    planning: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    service_provider: Mapping[str, str] = Field(
        default_factory=dict, alias="service-provider", validate_default=True
    )

    @field_validator("region", "planning", "service_provider")
    @classmethod
    def _normalize_keys(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(
            {_normalize_region(k): v.strip() for k, v in value.items() if v.strip()}
        )

    def _category(self, category: DistributionCategory) -> Mapping[str, str]:
        if category is DistributionCategory.REGION:
            return self.region
        if category is DistributionCategory.PLANNING:
            return self.planning
        return self.service_provider

    def lookup(self, category: DistributionCategory, region: str) -> str:
        """Return the address for `region` in `category`.

        Raises:
            ConfigLookupError: If no address is configured for the region.
        """

        address = self._category(category).get(_normalize_region(region))
        if address is None:
            raise ConfigLookupError(category, region)
        return address


def load_recipient_config(path: Path) -> RecipientConfig:
    """Load distribution lists from `path`.

    A missing file yields an empty config, so every group lookup fails for its own
    rule rather than preventing individual notifications.
    """

    if not path.exists():
        logger.warning("Distribution list file not found", extra={"path": str(path)})
        return RecipientConfig()

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Distribution list file must contain a JSON object: {path}")
    return RecipientConfig.model_validate(raw)
