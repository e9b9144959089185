"""
Static per-property configuration.

Properties are loaded once at process start from the JSON file named by
PROPERTY_CONFIG_PATH and never change afterwards. The file maps Hostex
property ids to their settings:

    {
        "123456": {
            "times": {"check_in_hour": 16, "check_in_minute": 0,
                      "check_out_hour": 12, "check_out_minute": 0},
            "voucher_greenlist": ["SUMMER2024", "WELCOME10"],
            "thirdparty_account_id": "422121",
            "loyalty_to_voucher": {"discount_type": "flat", "minimum_stay": 1,
                                   "number_of_redemptions": 1}
        }
    }
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog
from pydantic import TypeAdapter

from hostex_bridge.config import PROPERTY_CONFIG_PATH
from hostex_bridge.schemas.properties import (
    LoyaltyToVoucherConfig,
    PropertyConfig,
    PropertyTimeConfig,
)

logger = structlog.get_logger(__name__)

# Check-in at 4pm, check-out at noon
DEFAULT_TIMES = PropertyTimeConfig(
    check_in_hour=16, check_in_minute=0, check_out_hour=12, check_out_minute=0
)

_properties_adapter = TypeAdapter(dict[int, PropertyConfig])


class PropertyRegistry:
    """
    Read-only lookup over configured properties.

    Every lookup falls back to a documented default for unconfigured ids, so
    callers never need to check membership first.

    Example:
        >>> registry = PropertyRegistry({123: PropertyConfig(thirdparty_account_id="42")})
        >>> registry.get_property_thirdparty_account_id(123)
        '42'
        >>> registry.get_property_times(999) == DEFAULT_TIMES
        True
    """

    def __init__(self, properties: Optional[Mapping[int, PropertyConfig]] = None):
        self._properties: dict[int, PropertyConfig] = dict(properties or {})

    @classmethod
    def from_dict(cls, raw: Mapping[Any, Any]) -> "PropertyRegistry":
        """Validate a raw mapping (JSON keys are strings) into a registry."""
        return cls(_properties_adapter.validate_python(dict(raw)))

    def get_property_times(self, property_id: int) -> PropertyTimeConfig:
        config = self._properties.get(property_id)
        return config.times if config else DEFAULT_TIMES

    def get_property_voucher_greenlist(self, property_id: int) -> list[str]:
        config = self._properties.get(property_id)
        return list(config.voucher_greenlist) if config else []

    def get_property_thirdparty_account_id(self, property_id: int) -> Optional[str]:
        config = self._properties.get(property_id)
        return config.thirdparty_account_id if config else None

    def get_property_loyalty_to_voucher_config(
        self, property_id: int
    ) -> Optional[LoyaltyToVoucherConfig]:
        config = self._properties.get(property_id)
        return config.loyalty_to_voucher if config else None

    def get_all_property_ids(self) -> list[int]:
        """Property ids in configuration order."""
        return list(self._properties)


def load_property_registry(path: Optional[str]) -> PropertyRegistry:
    """
    Load property configuration from a JSON file.

    Args:
        path (Optional[str]): Path to the JSON file. None yields an empty registry.

    Returns:
        PropertyRegistry: Validated registry.

    Raises:
        FileNotFoundError: If the path is set but does not exist.
        pydantic.ValidationError: If the file content is malformed.
    """
    if not path:
        logger.warning("property_config_missing", reason="PROPERTY_CONFIG_PATH not set")
        return PropertyRegistry()

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    registry = PropertyRegistry.from_dict(raw)
    logger.info(
        "property_config_loaded",
        path=path,
        property_count=len(registry.get_all_property_ids()),
    )
    return registry


@lru_cache(maxsize=1)
def get_property_registry() -> PropertyRegistry:
    """Process-wide registry, loaded on first use."""
    return load_property_registry(PROPERTY_CONFIG_PATH)
