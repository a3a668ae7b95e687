"""Runtime configuration read from environment variables.

``FARM_LOG_DIR``          directory for the rotating log file (``logs``)
``FARM_LOG_LEVEL``        logging level name (``INFO``)
``FARM_FANCY_INVENTORY``  ``1``/``0``: run a fancy or a basic inventory (``1``)
``FARM_SHOP_NAME``        shop name printed on receipts
``FARM_SHOP_ADDRESS``     shop address printed on receipts
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"FARM_LOG_LEVEL must be a logging level name, got {raw!r}")
    return level


@dataclass(frozen=True)
class FarmConfig:
    log_dir: str = "logs"
    log_level: int = logging.INFO
    fancy_inventory: bool = True
    shop_name: str = "The Farm Shop"
    shop_address: str = "12 Paddock Road, Gatton"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FarmConfig":
        """Build a config from ``environ`` (``os.environ`` by default).

        Unset variables keep their defaults.

        Raises:
            ValueError: If a level or flag cannot be parsed.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            log_dir=env.get("FARM_LOG_DIR", defaults.log_dir),
            log_level=_parse_level(env["FARM_LOG_LEVEL"]) if "FARM_LOG_LEVEL" in env else defaults.log_level,
            fancy_inventory=(
                _parse_bool("FARM_FANCY_INVENTORY", env["FARM_FANCY_INVENTORY"])
                if "FARM_FANCY_INVENTORY" in env
                else defaults.fancy_inventory
            ),
            shop_name=env.get("FARM_SHOP_NAME", defaults.shop_name),
            shop_address=env.get("FARM_SHOP_ADDRESS", defaults.shop_address),
        )
