"""Booking screen configuration."""

from pydantic import BaseModel, Field


class BookingConfig(BaseModel):
    """
    Booking screen configuration.

    Durations are in seconds. Endpoint and credentials come from Vault
    (see clients.vault_client); everything here has a working default.
    """

    # Booking service
    service_base_url: str | None = Field(
        default=None,
        description="Base URL of the booking service; None resolves it from Vault",
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        description="Per-request timeout for booking service calls",
        gt=0,
        le=120,
    )

    # Draft persistence
    debounce_seconds: float = Field(
        default=0.4,
        description="Quiet window before a draft snapshot is written",
        ge=0,
        le=1.0,
    )
    session_key_prefix: str = Field(
        default="banquet",
        description="Namespace for session keys in Valkey",
    )
    session_ttl_seconds: int = Field(
        default=86400,
        description="Lifetime of a stored session snapshot",
        ge=60,
    )

    # Scheduling
    frame_interval_seconds: float = Field(
        default=1 / 60,
        description="Window in which date edits collapse into one range check",
        gt=0,
        le=0.1,
    )

    # Submission guards
    busy_safety_timeout_seconds: float = Field(
        default=30.0,
        description="An in-flight submission older than this no longer blocks the gate",
        gt=0,
    )
    one_shot_timeout_seconds: float = Field(
        default=5.0,
        description="Expiry of the item add/edit in-progress flag",
        gt=0,
    )
    cooldown_seconds: float = Field(
        default=0.0,
        description="Pause after a submission completes before the same kind is allowed again",
        ge=0,
    )

    # Money
    receipt_epsilon: float = Field(
        default=0.0001,
        description="Tolerance when comparing a receipt to the remaining balance",
        gt=0,
        le=0.01,
    )
