"""
Adaptive Flow Endpoints

GET  /api/v1/flow/questionnaire - Loaded questionnaire
POST /api/v1/flow/start         - New session state + first block
POST /api/v1/flow/next          - Next block for answers + history
POST /api/v1/flow/answer        - Validate, record, advance
POST /api/v1/flow/back          - Pop the last shown block

The API is stateless: clients send the FlowState back on each call.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from vivario.content import get_loader
from vivario.errors import AnswerValidationError, ContentConfigurationError
from vivario.questionnaire.models import Block, Questionnaire
from .controller import advance, go_back, next_block, start
from .models import FlowState, FlowStep

router = APIRouter(
    prefix="/api/v1/flow",
    tags=["flow"],
)


class StartRequest(BaseModel):
    answers: Dict[str, Any] = Field(
        default_factory=dict,
        description="Prior answers when resuming a session",
    )


class NextBlockRequest(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict)
    shown: List[str] = Field(default_factory=list)
    energy: Optional[str] = Field(default=None, description="low | medium | high")


class NextBlockResponse(BaseModel):
    success: bool = True
    block: Optional[Block] = None
    finished: bool = False
    generated_at: datetime = Field(default_factory=datetime.utcnow)


class AnswerRequest(BaseModel):
    state: FlowState
    block_id: str
    values: Any = None


class BackRequest(BaseModel):
    state: FlowState


class FlowStepResponse(BaseModel):
    success: bool = True
    step: FlowStep


def _questionnaire() -> Questionnaire:
    try:
        return get_loader().questionnaire
    except ContentConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.to_dict())


@router.get("/questionnaire", response_model=Questionnaire)
async def get_questionnaire():
    """Full questionnaire as loaded from content data."""
    return _questionnaire()


@router.post("/start", response_model=FlowStepResponse)
async def start_flow(request: StartRequest):
    try:
        return FlowStepResponse(step=start(_questionnaire(), request.answers))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Flow error: {str(e)}")


@router.post("/next", response_model=NextBlockResponse)
async def next_block_endpoint(request: NextBlockRequest):
    """
    Pure transition: which block comes after this history.

    Does not validate or record anything.
    """
    try:
        block = next_block(_questionnaire(), request.answers, request.shown, request.energy)
        return NextBlockResponse(block=block, finished=block is None)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Flow error: {str(e)}")


@router.post("/answer", response_model=FlowStepResponse)
async def answer_block(request: AnswerRequest):
    """
    Validate and record an answer for the current block.

    Returns 422 with the user-facing message when the answer is invalid.
    """
    try:
        step = advance(request.state, _questionnaire(), request.block_id, request.values)
        return FlowStepResponse(step=step)
    except AnswerValidationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Flow error: {str(e)}")


@router.post("/back", response_model=FlowStepResponse)
async def back(request: BackRequest):
    try:
        return FlowStepResponse(step=go_back(request.state, _questionnaire()))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Flow error: {str(e)}")
