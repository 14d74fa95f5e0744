"""
Session & Check-in Endpoints

PUT /api/v1/checkins/{user_id}/{date} - Record one day's check-in
GET /api/v1/checkins/{user_id}        - Check-ins + adherence
GET /api/v1/sessions/{session_id}     - Stored scenarios / result
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from vivario.planner.adherence import compute_adherence
from vivario.planner.models import CheckIn
from .memory import get_store

router = APIRouter(
    prefix="/api/v1",
    tags=["sessions"],
)


class CheckInRequest(BaseModel):
    done: bool
    note: str = Field(default="", max_length=2000)


class CheckInListResponse(BaseModel):
    success: bool = True
    user_id: str
    checkins: List[CheckIn]
    adherence: float
    streak: int
    last: Optional[date] = None


@router.put("/checkins/{user_id}/{day}", response_model=CheckIn)
async def put_checkin(user_id: str, day: date, request: CheckInRequest):
    return get_store().put_checkin(user_id, day, request.done, request.note)


@router.get("/checkins/{user_id}", response_model=CheckInListResponse)
async def list_checkins(user_id: str, today: Optional[date] = None):
    try:
        store = get_store()
        stats = compute_adherence(store.raw_checkins(user_id), today)
        return CheckInListResponse(
            user_id=user_id,
            checkins=store.list_checkins(user_id),
            adherence=stats.adherence,
            streak=stats.streak,
            last=stats.last,
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Check-in error: {str(e)}")


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> Dict[str, Any]:
    session = get_store().get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return session
