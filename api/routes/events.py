from fastapi import APIRouter
from database.models import EVENTS
from api.models.registration import EventListResponse

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("/", response_model=EventListResponse)
async def get_events():
    """Список мероприятий для формы регистрации"""
    return EventListResponse(events=EVENTS)
