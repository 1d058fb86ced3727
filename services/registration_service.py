from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from database.models import Registration, UNIQUE_FIELDS
from api.models.registration import RegistrationCreate
from typing import List, Optional
import logging
import re

logger = logging.getLogger(__name__)

MYSQL_KEY_PATTERN = re.compile(r"for key '([^']+)'")

REQUIRED_FIELDS = (
    "name",
    "college_name",
    "email",
    "course_of_study",
    "whatsapp_number",
    "selected_events",
    "transaction_id",
    "payment_proof_url",
)


class RegistrationError(Exception):
    """Базовая ошибка регистрации"""


class MissingFieldsError(RegistrationError):
    def __init__(self):
        super().__init__("All fields are required")


class InvalidRegistrationError(RegistrationError):
    pass


class DuplicateRegistrationError(RegistrationError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} already registered")


class RegistrationNotFoundError(RegistrationError):
    def __init__(self, registration_id: int):
        self.registration_id = registration_id
        super().__init__("Registration not found")


def find_existing(db: Session, email: str, transaction_id: str) -> Optional[Registration]:
    """Найти регистрацию с таким же email или transaction_id"""
    return db.query(Registration).filter(
        or_(Registration.email == email, Registration.transaction_id == transaction_id)
    ).first()


def _duplicate_field(existing: Registration, values: dict) -> str:
    for field in UNIQUE_FIELDS:
        if getattr(existing, field) == values[field]:
            return field
    return UNIQUE_FIELDS[0]


def _constraint_text(error: IntegrityError) -> str:
    """
    Часть сообщения драйвера, где названо нарушенное ограничение (без значений).

    PostgreSQL: diag.constraint_name, MySQL: "... for key '<индекс>'",
    SQLite: сообщение целиком ("UNIQUE constraint failed: registrations.email").
    """
    orig = error.orig
    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name

    message = str(orig)
    key_match = MYSQL_KEY_PATTERN.search(message)
    if key_match:
        return key_match.group(1)
    return message


def _conflicting_field(db: Session, error: IntegrityError, values: dict) -> Optional[str]:
    """
    Определить поле, нарушившее уникальный индекс.

    Ищем только имя столбца (registrations.<поле>) или индекса (ix_registrations_<поле>),
    значения из сообщения не учитываются. Если не нашли - повторный запрос.
    """
    constraint = _constraint_text(error)
    for field in UNIQUE_FIELDS:
        if f"registrations.{field}" in constraint or f"ix_registrations_{field}" in constraint:
            return field

    existing = find_existing(db, values["email"], values["transaction_id"])
    if existing:
        return _duplicate_field(existing, values)
    return None


def create_registration(db: Session, payload: RegistrationCreate) -> Registration:
    """
    Создать регистрацию.

    Порядок: проверка наличия полей, валидация модели, быстрая проверка дубликатов,
    запись. Уникальные индексы в БД - основной механизм: конфликт при записи
    переводится в ту же ошибку DuplicateRegistrationError.
    """
    data = payload.model_dump()
    if any(not data.get(field) for field in REQUIRED_FIELDS):
        raise MissingFieldsError()

    try:
        registration = Registration(**{field: data[field] for field in REQUIRED_FIELDS})
    except ValueError as e:
        raise InvalidRegistrationError(str(e)) from e

    values = {field: getattr(registration, field) for field in UNIQUE_FIELDS}
    existing = find_existing(db, values["email"], values["transaction_id"])
    if existing:
        field = _duplicate_field(existing, values)
        logger.info(f"Duplicate registration rejected by pre-check: {field}")
        raise DuplicateRegistrationError(field)

    db.add(registration)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        field = _conflicting_field(db, e, values)
        if field is None:
            logger.exception("Integrity error without a conflicting registration")
            raise
        logger.info(f"Duplicate registration rejected by unique index: {field}")
        raise DuplicateRegistrationError(field) from e
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(registration)
    logger.info(f"Registration {registration.id} created")
    return registration


def list_registrations(db: Session) -> List[Registration]:
    """Все регистрации (без сортировки, порядок определяет клиент)"""
    return db.query(Registration).all()


def get_registration(db: Session, registration_id: int) -> Registration:
    registration = db.query(Registration).filter(Registration.id == registration_id).first()
    if not registration:
        raise RegistrationNotFoundError(registration_id)
    return registration
