"""Execution configuration model for the action engine."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from action_engine.core.domain.types import CellSearchKey


class RetryConfig(BaseModel):
    """Bounded polling for auxiliary dependency cells.

    At least one of max_attempts / deadline_seconds must be set so that a
    permanently missing cell cannot stall a batch.
    """

    max_attempts: int | None = Field(default=30, ge=1)
    interval_seconds: float = Field(default=1.0, ge=0)
    deadline_seconds: float | None = Field(default=None, gt=0)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_bounded(self) -> RetryConfig:
        if self.max_attempts is None and self.deadline_seconds is None:
            raise ValueError("dependency_retry needs max_attempts or deadline_seconds")
        return self


class ExecuteConfig(BaseModel):
    """Structured execution configuration.

    JSON example:
        {
          "slippage": "0.005",
          "fee_rate": 1000,
          "is_mainnet": false,
          "extra_cell_deps": {
            "RUSD": {"script": {"code_hash": "0x...", "hash_type": "type", "args": "0x..."}}
          }
        }
    """

    slippage: str = Field(..., min_length=1)
    fee_rate: int = Field(..., gt=0)

    is_mainnet: bool = False
    hd_path_prefix: str = ""

    native_symbol: str = Field(default="CKB", min_length=1)
    amount_decimals: int = Field(default=8, ge=0, le=38)

    tick_interval_seconds: float = Field(default=10.0, ge=0)
    action_timeout_seconds: float | None = Field(default=None, gt=0)
    batch_timeout_seconds: float | None = Field(default=None, gt=0)
    concurrent_dispatch: bool = False

    dependency_retry: RetryConfig = Field(default_factory=RetryConfig)

    # JSON-lines audit trail of engine events; disabled when None.
    event_log_path: str | None = None

    # Symbols whose scripts need an extra cell dep, keyed by token symbol.
    extra_cell_deps: dict[str, CellSearchKey] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> ExecuteConfig:
        """Create an ExecuteConfig instance from a JSON-compatible object."""
        return cls.model_validate(obj)

    @field_validator("slippage")
    @classmethod
    def validate_slippage(cls, value: str) -> str:
        try:
            parsed = Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"slippage is not a decimal: {value!r}") from exc
        if not parsed.is_finite() or not Decimal(0) < parsed < Decimal(1):
            raise ValueError("slippage must be within (0, 1)")
        return value

    @property
    def base_unit_scale(self) -> Decimal:
        """Divisor converting base units into decimal units."""
        return Decimal(10) ** self.amount_decimals
