"""Pydantic model for the [transcode] configuration section.

The model validates raw TOML/CLI values; load_transcode_policy() converts a
validated model into the frozen TranscodePolicy dataclass used by the core.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vtc.domain import (
    AlignmentMode,
    HardwareMode,
    InvalidMetadataPolicy,
    RoundingMode,
)
from vtc.policy.types import (
    DEFAULT_AUDIO_BITRATE,
    DEFAULT_BITRATE,
    TranscodePolicy,
    parse_bitrate,
)


class PolicyValidationError(Exception):
    """Error during transcode policy validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class TranscodePolicyModel(BaseModel):
    """Pydantic model for transcode policy settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_height: int = Field(default=720, ge=1)
    bitrate: str | int = DEFAULT_BITRATE
    audio_bitrate: str | int = DEFAULT_AUDIO_BITRATE
    block_size: int = Field(default=16, ge=2, le=128)
    alignment: Literal["floor", "ceil"] = "floor"
    rounding: Literal["half_away", "truncate"] = "half_away"
    on_invalid_metadata: Literal["fail", "passthrough"] = "fail"
    max_size_ratio: float = Field(default=0.95, gt=0.0, le=1.0)
    hardware: Literal["auto", "none"] = "auto"

    @field_validator("bitrate", "audio_bitrate")
    @classmethod
    def validate_bitrate(cls, v: str | int) -> str | int:
        """Validate bitrate format."""
        value = v if isinstance(v, int) else parse_bitrate(v)
        if value is None or value <= 0:
            raise ValueError(
                f"Invalid bitrate '{v}'. "
                "Must be a number optionally followed by M or k (e.g., '1.5M', '128k')."
            )
        return v

    @field_validator("block_size")
    @classmethod
    def validate_block_size(cls, v: int) -> int:
        """Validate that the block size is even."""
        if v % 2:
            raise ValueError(f"block_size must be even, got {v}")
        return v


def _to_bits(value: str | int) -> int:
    if isinstance(value, int):
        return value
    parsed = parse_bitrate(value)
    # validate_bitrate already rejected unparseable strings
    assert parsed is not None
    return parsed


def convert_policy_model(model: TranscodePolicyModel) -> TranscodePolicy:
    """Convert a validated TranscodePolicyModel to a TranscodePolicy."""
    return TranscodePolicy(
        max_height=model.max_height,
        bitrate=_to_bits(model.bitrate),
        audio_bitrate=_to_bits(model.audio_bitrate),
        block_size=model.block_size,
        alignment=AlignmentMode(model.alignment),
        rounding=RoundingMode(model.rounding),
        on_invalid_metadata=InvalidMetadataPolicy(model.on_invalid_metadata),
        max_size_ratio=model.max_size_ratio,
        hardware=HardwareMode(model.hardware),
    )


def _format_validation_error(error: ValidationError) -> tuple[str, str | None]:
    """Format a Pydantic validation error into a message and field name."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Transcode policy validation failed: {loc}: {msg}", loc
        return f"Transcode policy validation failed: {msg}", None
    return f"Transcode policy validation failed: {error}", None


def load_transcode_policy(data: dict[str, Any] | None) -> TranscodePolicy:
    """Validate a [transcode] mapping and build a TranscodePolicy.

    Args:
        data: Raw mapping (e.g. from a TOML file). None or empty gives defaults.

    Returns:
        Validated TranscodePolicy.

    Raises:
        PolicyValidationError: If the mapping is invalid.
    """
    try:
        model = TranscodePolicyModel.model_validate(data or {})
    except ValidationError as e:
        message, field = _format_validation_error(e)
        raise PolicyValidationError(message, field=field) from e
    return convert_policy_model(model)
