"""
vesting.config — immutable vesting configuration and process settings.

Two layers live here:

1) `VestingConfig`: the per-instance, set-once parameters (Merkle root,
   vesting duration, horizon, reward asset handle). Built through
   `VestingConfig.create(...)`, which rejects anything that could never
   yield a usable instance with `InvalidConfiguration`.

2) `Settings`: process-wide knobs read from the environment with safe
   defaults. No third-party deps; safe to import very early.

Configuration precedence for `Settings`:
  1) Environment variables (VESTING_*)
  2) Hardcoded defaults below

Key env vars:
  - VESTING_ADDRESS_LEN   (int)          default: 32   (clamped to [1, 64])
  - VESTING_LOG_LEVEL     (str)          default: INFO
  - VESTING_LOG_FORMAT    (json|text)    default: auto (json when not a TTY)

Usage:
    from vesting.config import load_settings
    SETTINGS = load_settings()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

from .errors import EncodingError, InvalidConfiguration
from .hashing import HexOrBytes, to_digest, to_hex


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_choice(name: str, choices: tuple, default: Optional[str]) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val if val in choices else default


# ------------------------------- settings ------------------------------------


@dataclass(frozen=True)
class Settings:
    address_len: int
    log_level: str
    log_format: Optional[str]  # None => decide by TTY

    def as_dict(self) -> Dict[str, Any]:
        return {
            "address_len": self.address_len,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Build and cache Settings from environment + defaults."""
    return Settings(
        address_len=_env_int("VESTING_ADDRESS_LEN", 32, min_v=1, max_v=64),
        log_level=(os.getenv("VESTING_LOG_LEVEL") or "INFO").strip().upper(),
        log_format=_env_choice("VESTING_LOG_FORMAT", ("json", "text"), None),
    )


# ---------------------------- vesting config ---------------------------------


@dataclass(frozen=True)
class VestingConfig:
    """
    Set-once parameters of one vesting instance.

    Fields
    ------
    merkle_root:            32-byte commitment over (index, account, share) leaves.
    total_vesting_duration: length of the vesting horizon (time units, > 0).
    vesting_start_time:     construction time.
    vesting_end_time:       vesting_start_time + total_vesting_duration; does not
                            depend on when individual positions are activated.
    reward_asset:           handle exposing `transfer(to, amount) -> bool`.
    """

    merkle_root: bytes
    total_vesting_duration: int
    vesting_start_time: int
    vesting_end_time: int
    reward_asset: Any

    @classmethod
    def create(
        cls,
        merkle_root: HexOrBytes,
        total_vesting_duration: int,
        reward_asset: Any,
        *,
        start_time: int,
    ) -> "VestingConfig":
        try:
            root = to_digest(merkle_root, name="merkle_root")
        except EncodingError as e:
            raise InvalidConfiguration(str(e.message), details={"field": "merkle_root"}) from e

        if isinstance(total_vesting_duration, bool) or not isinstance(total_vesting_duration, int):
            raise InvalidConfiguration(
                "total_vesting_duration must be an integer",
                details={"type": type(total_vesting_duration).__name__},
            )
        if total_vesting_duration <= 0:
            raise InvalidConfiguration(
                "total_vesting_duration must be positive",
                details={"total_vesting_duration": total_vesting_duration},
            )
        if isinstance(start_time, bool) or not isinstance(start_time, int) or start_time < 0:
            raise InvalidConfiguration(
                "start_time must be a non-negative integer", details={"start_time": repr(start_time)}
            )
        if not callable(getattr(reward_asset, "transfer", None)):
            raise InvalidConfiguration(
                "reward_asset must expose transfer(to, amount)",
                details={"type": type(reward_asset).__name__},
            )

        return cls(
            merkle_root=root,
            total_vesting_duration=total_vesting_duration,
            vesting_start_time=start_time,
            vesting_end_time=start_time + total_vesting_duration,
            reward_asset=reward_asset,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "merkle_root": to_hex(self.merkle_root),
            "total_vesting_duration": self.total_vesting_duration,
            "vesting_start_time": self.vesting_start_time,
            "vesting_end_time": self.vesting_end_time,
            "reward_asset": type(self.reward_asset).__name__,
        }


__all__ = ["Settings", "load_settings", "VestingConfig"]
