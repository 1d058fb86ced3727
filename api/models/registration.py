from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime
from utils.timezone import to_aware_utc


class RegistrationCreate(BaseModel):
    # Все поля опциональны: проверку наличия делает сервис (400, а не 422)
    name: Optional[str] = None
    college_name: Optional[str] = None
    email: Optional[str] = None
    course_of_study: Optional[str] = None
    whatsapp_number: Optional[str] = None
    selected_events: Optional[List[str]] = None
    transaction_id: Optional[str] = None
    payment_proof_url: Optional[str] = None


class RegistrationConfirmation(BaseModel):
    id: int
    email: str
    name: str

    class Config:
        from_attributes = True


class RegistrationCreated(BaseModel):
    message: str
    registration: RegistrationConfirmation


class RegistrationSummary(BaseModel):
    """Запись для списка в дашборде (без payment_proof_url)"""
    id: int
    name: str
    college_name: str
    email: str
    course_of_study: str
    whatsapp_number: str
    selected_events: List[str]
    transaction_id: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return to_aware_utc(value)

    class Config:
        from_attributes = True


class RegistrationResponse(RegistrationSummary):
    payment_proof_url: str


class EventListResponse(BaseModel):
    events: List[str]
