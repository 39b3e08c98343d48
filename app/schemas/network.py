"""Pydantic schemas for referral network capacity."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LevelCapacity(BaseModel):
    """Maximum members allowed at one depth of a sponsor's network."""

    level: int = Field(..., ge=1, description="Network depth (1 = direct referrals).")
    max_members: int = Field(
        ..., ge=0, description="Maximum members allowed at this level per sponsor."
    )


class NetworkAppSettings(BaseModel):
    """Subset of the platform app settings read by the capacity gate."""

    max_members_per_level: list[LevelCapacity] = Field(
        default_factory=list,
        description="One entry per configured level; missing levels are uncapped.",
    )

    def capacity_for_level(self, level: int) -> LevelCapacity | None:
        for entry in self.max_members_per_level:
            if entry.level == level:
                return entry
        return None


class SponsorCapacityStatus(BaseModel):
    """Dashboard view of how full a sponsor's first level is."""

    sponsor_id: str = Field(..., description="Sponsor the figures belong to.")
    current_count: int = Field(..., ge=0, description="Direct referrals of the sponsor.")
    max_allowed: int = Field(
        ...,
        ge=0,
        description="Configured level-1 cap (0 when no level-1 cap is configured).",
    )
    available: int = Field(..., ge=0, description="Remaining slots, never negative.")
    percentage: int = Field(
        ..., ge=0, description="current_count / max_allowed as a rounded percentage."
    )


class ValidateCapacityRequest(BaseModel):
    """Request body for a pre-subscription capacity check."""

    user_id: str = Field(
        ...,
        min_length=1,
        description="Prospective subscriber whose sponsor should be checked.",
    )


class ValidateCapacityResponse(BaseModel):
    """Successful capacity check outcome."""

    allowed: bool = Field(True, description="Always true; rejections return 422.")
    user_id: str
    sponsor_id: str | None = Field(
        None, description="Sponsor found for the user (None for independent signups)."
    )
    current_count: int | None = Field(
        None, description="Direct referrals of the sponsor, excluding the user."
    )
    max_allowed: int | None = Field(
        None, description="Level-1 cap, or None when the sponsor is uncapped."
    )
