from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from connecto.core.errors import ValidationFailed
from connecto.core.security import get_current_user
from connecto.models.schemas import GenerateRequest, GenerateResponse
from connecto.models.user import User
from connecto.services.companion import AuraCompanion, get_companion

router = APIRouter(
    prefix="/companion",
    tags=["companion"]
)


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    data: GenerateRequest,
    current_user: User = Depends(get_current_user),
    companion: AuraCompanion = Depends(get_companion),
):
    """One-off Aura reply with no stored history."""
    if not data.prompt:
        raise ValidationFailed("Prompt is required")
    response = await companion.generate(data.prompt)
    return GenerateResponse(response=response, timestamp=datetime.now(timezone.utc))
