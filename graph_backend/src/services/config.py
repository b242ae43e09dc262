"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import math
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ENV_PREFIX = "LAYOUT_"


class LayoutConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    ticks: int = Field(default=300, description="Fixed number of simulation ticks per pass")
    link_distance: float = Field(default=100.0, description="Target separation of linked nodes")
    link_strength: Optional[float] = Field(
        default=None,
        description="Spring stiffness; None uses 1 / min(degree(source), degree(target))",
    )
    charge_strength: float = Field(default=-100.0, description="Many-body strength (negative repels)")
    charge_theta: float = Field(default=0.9, description="Barnes-Hut accuracy parameter")
    charge_distance_min: float = Field(default=1.0)
    charge_distance_max: float = Field(default=math.inf)
    exact_charge_max_nodes: int = Field(
        default=64,
        description="Use exact pairwise charge at or below this node count",
    )
    center_strength: float = Field(default=0.1, description="Pull toward the origin on each axis")
    collision_radius: float = Field(default=50.0, description="Per-node collision radius")
    collision_strength: float = Field(default=1.0)
    alpha: float = Field(default=1.0, description="Initial simulation heat")
    alpha_min: float = Field(default=0.001)
    alpha_target: float = Field(default=0.0)
    velocity_decay: float = Field(default=0.4, description="Fraction of velocity lost each tick")
    initial_radius: float = Field(default=10.0, description="Phyllotaxis seed spacing")
    seed: int = Field(default=0, description="Seed for coincident-point jiggle")
    scale: float = Field(default=3.0, description="Simulation to screen magnification")
    source_url: str = Field(
        default="http://127.0.0.1:3002",
        description="Base URL of the upstream graph service",
    )
    source_timeout: float = Field(default=10.0, description="Upstream request timeout in seconds")

    @field_validator("ticks", "exact_charge_max_nodes")
    @classmethod
    def _non_negative_int(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("link_distance", "collision_radius", "scale", "source_timeout", "initial_radius")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("charge_theta", "collision_strength", "charge_distance_min")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("velocity_decay")
    @classmethod
    def _unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("velocity_decay must be within [0, 1]")
        return value

    @field_validator("alpha_min")
    @classmethod
    def _open_unit_interval(cls, value: float) -> float:
        if not 0.0 < value < 1.0:
            raise ValueError("alpha_min must be within (0, 1)")
        return value

    @field_validator("source_url")
    @classmethod
    def _strip_url(cls, value: str) -> str:
        cleaned = value.strip().rstrip("/")
        if not cleaned:
            raise ValueError("LAYOUT_SOURCE_URL cannot be empty")
        return cleaned

    @model_validator(mode="after")
    def _check_distance_bounds(self) -> "LayoutConfig":
        if self.charge_distance_max <= self.charge_distance_min:
            raise ValueError("charge_distance_max must exceed charge_distance_min")
        return self

    @property
    def alpha_decay(self) -> float:
        """Per-tick decay that takes alpha from 1 to alpha_min over 300 ticks."""
        return 1.0 - self.alpha_min ** (1.0 / 300.0)


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{key}", default)


@lru_cache(maxsize=1)
def get_config() -> LayoutConfig:
    """Load and cache layout configuration."""
    overrides = {}
    for name in LayoutConfig.model_fields:
        raw = _read_env(name.upper())
        if raw is not None and raw.strip() != "":
            overrides[name] = raw.strip()
    return LayoutConfig(**overrides)


def reload_config() -> LayoutConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["LayoutConfig", "get_config", "reload_config", "ENV_PREFIX"]
