"""
Profile Endpoints

POST /api/v1/profile - Build a profile from raw answers
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from vivario.content import get_loader
from vivario.errors import ContentConfigurationError
from .builder import build_profile
from .models import Profile

router = APIRouter(
    prefix="/api/v1/profile",
    tags=["profile"],
)


class ProfileRequest(BaseModel):
    answers: Dict[str, Any] = Field(
        description="block id -> option id, list of option ids, or number"
    )


class ProfileResponse(BaseModel):
    success: bool = True
    profile: Profile
    low_energy: bool
    many_things: bool
    urgent: bool
    generated_at: datetime = Field(default_factory=datetime.utcnow)


@router.post("", response_model=ProfileResponse)
async def build_profile_endpoint(request: ProfileRequest):
    """Derive roles, scores, root category and focus from answers."""
    try:
        profile = build_profile(request.answers, get_loader().questionnaire)
        return ProfileResponse(
            profile=profile,
            low_energy=profile.low_energy,
            many_things=profile.many_things,
            urgent=profile.urgent,
        )
    except ContentConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Profile error: {str(e)}")
