"""
Scenario Endpoints

POST /api/v1/scenarios           - All four variants + summary
POST /api/v1/scenarios/{variant} - One variant (main, step, calm, norm)

Composed scenarios are stored as a session unless `store` is false.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from vivario.content import get_loader
from vivario.errors import ContentConfigurationError
from vivario.profile import Profile, build_profile
from vivario.store import get_store
from .composer import compose_all, compose_scenario, summarize
from .models import Scenario, Variant

router = APIRouter(
    prefix="/api/v1/scenarios",
    tags=["scenarios"],
)


class ScenarioRequest(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict)
    store: bool = Field(default=True, description="Persist as a session")


class ScenarioSetResponse(BaseModel):
    success: bool = True
    session_id: Optional[str] = None
    profile: Profile
    scenarios: Dict[str, Scenario]
    summary: Dict[str, str]
    generated_at: datetime = Field(default_factory=datetime.utcnow)


class SingleScenarioResponse(BaseModel):
    success: bool = True
    variant: Variant
    text: str
    scenario: Scenario


@router.post("", response_model=ScenarioSetResponse)
async def compose_scenarios(request: ScenarioRequest):
    """
    Compose main, step, calm and norm for the same answers.

    Same answers always give the same four texts.
    """
    try:
        loader = get_loader()
        profile = build_profile(request.answers, loader.questionnaire)
        scenarios = compose_all(profile, loader.library)
        summary = summarize(scenarios)

        session_id = None
        if request.store:
            session_id = get_store().save_session("scenarios", {
                "answers": request.answers,
                "profile": profile.snapshot(),
                "scenarios": {k: s.model_dump(mode="json") for k, s in scenarios.items()},
                "summary": summary,
            })

        return ScenarioSetResponse(
            session_id=session_id,
            profile=profile,
            scenarios=scenarios,
            summary=summary,
        )
    except ContentConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Scenario error: {str(e)}")


@router.post("/{variant}", response_model=SingleScenarioResponse)
async def compose_one(variant: str, request: ScenarioRequest):
    try:
        try:
            key = Variant(variant)
        except ValueError:
            raise HTTPException(
                status_code=404,
                detail=f"Unknown variant '{variant}'. Use one of: {[v.value for v in Variant]}",
            )
        loader = get_loader()
        profile = build_profile(request.answers, loader.questionnaire)
        scenario = compose_scenario(profile, key, loader.library)
        return SingleScenarioResponse(variant=key, text=scenario.text, scenario=scenario)
    except ContentConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Scenario error: {str(e)}")
