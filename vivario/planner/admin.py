"""
Diagnostic & Plan Endpoints

POST /api/v1/results - Diagnostic + daily plan + weekly plan for answers
POST /api/v1/plans   - Weekly plan only

When a user_id is given, its stored check-ins feed adherence.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from vivario.content import get_loader
from vivario.errors import ContentConfigurationError
from vivario.profile import build_profile
from vivario.store import get_store
from .models import PlanOptions, ResultPayload, WeeklyPlan
from .plan import build_plan
from .result import build_result

router = APIRouter(
    prefix="/api/v1",
    tags=["planner"],
)


class ResultRequest(BaseModel):
    answers: Dict[str, Any]
    shown: List[str] = Field(default_factory=list)
    user_id: Optional[str] = None
    today: Optional[date] = None
    store: bool = True


class ResultResponse(BaseModel):
    success: bool = True
    session_id: Optional[str] = None
    result: ResultPayload


class PlanRequest(BaseModel):
    answers: Dict[str, Any]
    start_date: Optional[date] = None
    user_id: str = "anonymous"
    salt: str = "v1"
    used_module_ids: List[str] = Field(default_factory=list)


class PlanResponse(BaseModel):
    success: bool = True
    plan: WeeklyPlan


@router.post("/results", response_model=ResultResponse)
async def create_result(request: ResultRequest):
    """
    Build the full result payload.

    Urgency markers in the answers replace the diagnostic with the
    safety-first version.
    """
    try:
        loader = get_loader()
        checkins = get_store().raw_checkins(request.user_id) if request.user_id else None
        result = build_result(
            request.answers,
            request.shown,
            loader.questionnaire,
            loader.modules,
            checkins=checkins,
            today=request.today,
            user_id=request.user_id or "anonymous",
        )

        session_id = None
        if request.store:
            session_id = get_store().save_session("result", result.model_dump(mode="json"))

        return ResultResponse(session_id=session_id, result=result)
    except ContentConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Result error: {str(e)}")


@router.post("/plans", response_model=PlanResponse)
async def create_plan(request: PlanRequest):
    try:
        loader = get_loader()
        profile = build_profile(request.answers, loader.questionnaire)
        plan = build_plan(
            profile,
            loader.modules,
            PlanOptions(
                start_date=request.start_date,
                user_id=request.user_id,
                salt=request.salt,
                used_module_ids=request.used_module_ids,
            ),
        )
        return PlanResponse(plan=plan)
    except ContentConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Plan error: {str(e)}")
