"""
Identity API routes.
"""
from fastapi import APIRouter, Depends

from advocacy.core.exceptions import ValidationError
from advocacy.services.identity_service import IdentityService
from advocacy.schemas.auth import AdvocateLookupRequest, AdvocateLookupResponse, AdvocateResponse
from advocacy.api.deps import get_identity_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/advocate", response_model=AdvocateLookupResponse)
async def resolve_advocate(
    request: AdvocateLookupRequest,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Resolve an identity-provider user to a local advocate, creating it on first sight."""
    if request.action != "get_user":
        raise ValidationError("Invalid action")

    profile, advocate = await identity_service.resolve_or_create_advocate(
        request.user_id,
        email=request.email,
        name=request.name
    )
    return AdvocateLookupResponse(user=profile, advocate=AdvocateResponse.model_validate(advocate))
