"""Referral network capacity endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.api.dependencies import get_network_capacity_service
from app.core.auth import verify_api_key
from app.core.rate_limit import RateLimitPreset, rate_limit
from app.schemas.network import (
    SponsorCapacityStatus,
    ValidateCapacityRequest,
    ValidateCapacityResponse,
)
from app.services.network_capacity_service import NetworkCapacityService


router = APIRouter(tags=["Network"])

CapacityService = Annotated[NetworkCapacityService, Depends(get_network_capacity_service)]


@router.post(
    "/network/capacity/validate",
    response_model=ValidateCapacityResponse,
    dependencies=[
        Depends(verify_api_key),
        Depends(rate_limit("network:validate", RateLimitPreset.STANDARD)),
    ],
    responses={422: {"description": "Sponsor reached its direct member limit"}},
)
async def validate_capacity(
    payload: ValidateCapacityRequest,
    service: CapacityService,
) -> ValidateCapacityResponse:
    """Check that the user's sponsor can take one more direct member.

    Call before creating a new subscription (not for payment method updates).
    A 200 response is advisory: the final insert must still be protected by
    the database.

    Raises:
        NetworkCapacityError: Rendered as 422 with ``sponsor_capacity_reached``.
    """
    check = await service.check_sponsor_capacity(payload.user_id)
    if check.error is not None:
        raise check.error

    return ValidateCapacityResponse(
        allowed=True,
        user_id=payload.user_id,
        sponsor_id=check.sponsor_id,
        current_count=check.current_count,
        max_allowed=check.max_allowed,
    )


@router.get(
    "/network/sponsors/{sponsor_id}/capacity",
    response_model=SponsorCapacityStatus,
    dependencies=[
        Depends(verify_api_key),
        Depends(rate_limit("network:status", RateLimitPreset.GENEROUS)),
    ],
)
async def sponsor_capacity_status(
    sponsor_id: Annotated[str, Path(min_length=1)],
    service: CapacityService,
) -> SponsorCapacityStatus:
    """Level-1 occupancy for dashboard display."""
    return await service.get_sponsor_capacity_status(sponsor_id)
