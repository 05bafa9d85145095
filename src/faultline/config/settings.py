"""Configuration settings and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from faultline.core.categories import is_builtin_label
from faultline.core.range import Range
from faultline.engine.shrinker import ShrinkingConfig, ShrinkStrategy
from faultline.errors import ConfigValidationError, ErrorCode, ErrorContext
from faultline.generators.keys import BaseKeyStrategy, key_strategy_from_dict
from faultline.generators.values import ValueStrategy, value_strategy_from_dict
from faultline.injection.conditions import SystemCondition
from faultline.injection.config import FailureInjectionConfig


class FaultlineSettings(BaseSettings):
    """Configuration for a faultline property test run."""

    model_config = SettingsConfigDict(
        env_prefix="FAULTLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name: str = "property_test"
    seed: int = 42
    iterations: int = 100
    sequence_min: int = 50
    sequence_max: int = 200

    allocator_failure_probability: float = 0.0
    filesystem_error_probability: float = 0.0
    network_error_probability: float = 0.0
    custom_failures: dict[str, float] = Field(default_factory=dict)
    conditional_multipliers: list[dict[str, Any]] = Field(default_factory=list)

    key_strategy: dict[str, Any] = Field(default_factory=lambda: {"type": "uniform_random"})
    value_strategy: dict[str, Any] = Field(default_factory=lambda: {"type": "variable_size"})
    operation_weights: dict[str, float] = Field(default_factory=dict)

    detailed_stats: bool = False

    max_shrink_attempts: int = 100
    shrink_strategies: list[str] = Field(default_factory=lambda: ["remove_operations"])
    preserve_failure_conditions: bool = True

    @field_validator("iterations", "max_shrink_attempts")
    @classmethod
    def validate_non_negative(cls, v: int, info: ValidationInfo) -> int:
        if v < 0:
            raise ConfigValidationError(
                message=f"{info.field_name} must be >= 0, got {v}",
                field=info.field_name,
                value=v,
            )
        return v

    @field_validator(
        "allocator_failure_probability",
        "filesystem_error_probability",
        "network_error_probability",
    )
    @classmethod
    def validate_probability(cls, v: float, info: ValidationInfo) -> float:
        if not 0.0 <= v <= 1.0:
            raise ConfigValidationError(
                message=f"{info.field_name} must be within [0, 1], got {v}",
                error_code=ErrorCode.INVALID_PROBABILITY,
                field=info.field_name,
                value=v,
                expected="0.0 <= p <= 1.0",
            )
        return v

    @field_validator("custom_failures")
    @classmethod
    def validate_custom_failures(cls, v: dict[str, float]) -> dict[str, float]:
        errors = []
        for name, probability in v.items():
            if not name:
                errors.append("custom failure names must be non-empty")
            elif is_builtin_label(name):
                errors.append(f"custom failure '{name}' collides with a built-in category")
            if not 0.0 <= probability <= 1.0:
                errors.append(f"custom failure '{name}' probability must be within [0, 1], got {probability}")
        if errors:
            raise ConfigValidationError(errors=errors, field="custom_failures", value=v)
        return v

    @field_validator("conditional_multipliers")
    @classmethod
    def validate_conditional_multipliers(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        valid = {c.value for c in SystemCondition}
        errors = []
        for i, entry in enumerate(v):
            condition = entry.get("condition")
            if condition not in valid:
                errors.append(f"conditional_multipliers[{i}]: unknown condition {condition!r}")
            multiplier = entry.get("multiplier")
            if not isinstance(multiplier, (int, float)) or multiplier < 0:
                errors.append(f"conditional_multipliers[{i}]: multiplier must be a number >= 0, got {multiplier!r}")
            duration = entry.get("duration")
            if duration is not None and (not isinstance(duration, int) or duration < 0):
                errors.append(f"conditional_multipliers[{i}]: duration must be an integer >= 0, got {duration!r}")
        if errors:
            raise ConfigValidationError(
                errors=errors,
                field="conditional_multipliers",
                value=v,
                context=ErrorContext(extra={"valid_conditions": sorted(valid)}),
            )
        return v

    @field_validator("key_strategy")
    @classmethod
    def validate_key_strategy(cls, v: dict[str, Any]) -> dict[str, Any]:
        key_strategy_from_dict(v)
        return v

    @field_validator("value_strategy")
    @classmethod
    def validate_value_strategy(cls, v: dict[str, Any]) -> dict[str, Any]:
        value_strategy_from_dict(v)
        return v

    @field_validator("operation_weights")
    @classmethod
    def validate_operation_weights(cls, v: dict[str, float]) -> dict[str, float]:
        negative = {name: w for name, w in v.items() if w < 0}
        if negative:
            raise ConfigValidationError(
                message=f"Operation weights must be >= 0: {negative}",
                field="operation_weights",
                value=v,
            )
        return v

    @field_validator("shrink_strategies")
    @classmethod
    def validate_shrink_strategies(cls, v: list[str]) -> list[str]:
        valid = {s.value for s in ShrinkStrategy}
        invalid = set(v) - valid
        if invalid or not v:
            raise ConfigValidationError(
                message=f"Invalid shrink strategies: {sorted(invalid) or v}. Valid: {sorted(valid)}",
                field="shrink_strategies",
                value=v,
                context=ErrorContext(extra={"valid_strategies": sorted(valid)}),
            )
        return v

    @model_validator(mode="after")
    def validate_sequence_length(self) -> FaultlineSettings:
        if not self.sequence_range().validate():
            raise ConfigValidationError(
                message=(
                    f"sequence length range must satisfy 0 <= min <= max, "
                    f"got [{self.sequence_min}, {self.sequence_max}]"
                ),
                error_code=ErrorCode.INVALID_RANGE,
                field="sequence_min",
                value=(self.sequence_min, self.sequence_max),
            )
        return self

    def sequence_range(self) -> Range:
        return Range(self.sequence_min, self.sequence_max)

    def failure_config(self) -> FailureInjectionConfig:
        config = FailureInjectionConfig(
            allocator_failure_probability=self.allocator_failure_probability,
            filesystem_error_probability=self.filesystem_error_probability,
            network_error_probability=self.network_error_probability,
            custom_failure_probabilities=dict(self.custom_failures),
        )
        for entry in self.conditional_multipliers:
            config.add_multiplier(
                SystemCondition(entry["condition"]),
                float(entry["multiplier"]),
                entry.get("duration"),
            )
        return config

    def shrinking_config(self) -> ShrinkingConfig:
        return ShrinkingConfig(
            max_shrink_attempts=self.max_shrink_attempts,
            strategies=tuple(ShrinkStrategy(s) for s in self.shrink_strategies),
            preserve_failure_conditions=self.preserve_failure_conditions,
        )

    def build_key_strategy(self) -> BaseKeyStrategy:
        return key_strategy_from_dict(self.key_strategy)

    def build_value_strategy(self) -> ValueStrategy:
        return value_strategy_from_dict(self.value_strategy)


def load_config(config_path: str | Path | None = None) -> FaultlineSettings:
    """Load configuration from file and environment.

    Priority: CLI args > env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                try:
                    config_data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigValidationError(
                        message=f"Config file {config_path} is not valid YAML: {e}",
                        field="config_path",
                        value=str(config_path),
                        cause=e,
                    ) from e
            if not isinstance(config_data, dict):
                raise ConfigValidationError(
                    message=f"Config file {config_path} must contain a mapping",
                    field="config_path",
                    value=str(config_path),
                )

    env_overrides = _get_env_overrides()
    config_data.update(env_overrides)

    try:
        return FaultlineSettings(**config_data)
    except ValidationError as e:
        raise ConfigValidationError(
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
            cause=e,
        ) from e


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "FAULTLINE_NAME": "name",
        "FAULTLINE_SEED": ("seed", int),
        "FAULTLINE_ITERATIONS": ("iterations", int),
        "FAULTLINE_SEQUENCE_MIN": ("sequence_min", int),
        "FAULTLINE_SEQUENCE_MAX": ("sequence_max", int),
        "FAULTLINE_ALLOCATOR_FAILURE_PROBABILITY": ("allocator_failure_probability", float),
        "FAULTLINE_FILESYSTEM_ERROR_PROBABILITY": ("filesystem_error_probability", float),
        "FAULTLINE_NETWORK_ERROR_PROBABILITY": ("network_error_probability", float),
        "FAULTLINE_DETAILED_STATS": ("detailed_stats", _parse_bool),
        "FAULTLINE_MAX_SHRINK_ATTEMPTS": ("max_shrink_attempts", int),
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                try:
                    overrides[key] = converter(value)
                except ValueError as e:
                    raise ConfigValidationError(
                        message=f"Invalid value for {env_key}: {value!r}",
                        field=key,
                        value=value,
                        cause=e,
                    ) from e
            else:
                overrides[config_key] = value

    return overrides
