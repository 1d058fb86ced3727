from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from database.database import get_db
from api.auth import require_organizer
from api.models.registration import (
    RegistrationCreate, RegistrationCreated, RegistrationConfirmation,
    RegistrationSummary, RegistrationResponse
)
from services.registration_service import (
    create_registration, list_registrations, get_registration,
    RegistrationError, RegistrationNotFoundError
)
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["registrations"])


@router.post("/register", response_model=RegistrationCreated, status_code=201)
async def register(
    payload: RegistrationCreate,
    db: Session = Depends(get_db)
):
    """Создать регистрацию участника"""
    try:
        registration = create_registration(db, payload)
    except RegistrationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Registration write failed")
        raise HTTPException(status_code=500, detail="Registration failed")

    return RegistrationCreated(
        message="Registration successful",
        registration=RegistrationConfirmation.model_validate(registration)
    )


@router.get("/registrations", response_model=List[RegistrationSummary])
async def get_all_registrations(
    _: dict = Depends(require_organizer),
    db: Session = Depends(get_db)
):
    """Список всех регистраций для дашборда (без payment_proof_url)"""
    try:
        registrations = list_registrations(db)
    except SQLAlchemyError:
        logger.exception("Failed to load registrations")
        raise HTTPException(status_code=500, detail="Failed to load registrations")

    return [RegistrationSummary.model_validate(reg) for reg in registrations]


@router.get("/registrations/{registration_id}", response_model=RegistrationResponse)
async def get_registration_details(
    registration_id: int,
    _: dict = Depends(require_organizer),
    db: Session = Depends(get_db)
):
    """Полная запись регистрации, включая payment_proof_url"""
    try:
        registration = get_registration(db, registration_id)
    except RegistrationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SQLAlchemyError:
        logger.exception(f"Failed to load registration {registration_id}")
        raise HTTPException(status_code=500, detail="Failed to load registration")

    return RegistrationResponse.model_validate(registration)
