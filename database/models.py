from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import validates
from sqlalchemy.ext.declarative import declarative_base
from utils.timezone import get_utc_now
import re

Base = declarative_base()

# Мероприятия конференции (проверка принадлежности на сервере не выполняется)
EVENTS = [
    "Paper Presentation",
    "Poster Presentation",
    "Circuit Debugging",
    "Electronic Genius",
    "Quiz",
    "Project Presentation",
]

EMAIL_PATTERN = re.compile(r"\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+", re.ASCII)
PHONE_PATTERN = re.compile(r"\d{10}", re.ASCII)

# Поля с уникальным индексом, в порядке проверки
UNIQUE_FIELDS = ("email", "transaction_id")


def _required_text(key: str, value) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{key} is required")
    value = value.strip()
    if not value:
        raise ValueError(f"{key} is required")
    return value


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    college_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    course_of_study = Column(String(255), nullable=False)
    whatsapp_number = Column(String(10), nullable=False)
    selected_events = Column(JSON, nullable=False)  # Список названий мероприятий
    transaction_id = Column(String(255), unique=True, index=True, nullable=False)
    payment_proof_url = Column(String(2048), nullable=False)
    created_at = Column(DateTime, default=get_utc_now, nullable=False)

    @validates("name", "college_name", "course_of_study", "transaction_id", "payment_proof_url")
    def validate_text(self, key, value):
        return _required_text(key, value)

    @validates("email")
    def validate_email(self, key, value):
        value = _required_text(key, value).lower()
        if not EMAIL_PATTERN.fullmatch(value):
            raise ValueError("Please provide a valid email")
        return value

    @validates("whatsapp_number")
    def validate_whatsapp_number(self, key, value):
        value = _required_text(key, value)
        if not PHONE_PATTERN.fullmatch(value):
            raise ValueError("Please provide a valid 10-digit phone number")
        return value

    @validates("selected_events")
    def validate_selected_events(self, key, value):
        if not value or not isinstance(value, list):
            raise ValueError("At least one event must be selected")
        if not all(isinstance(event, str) and event.strip() for event in value):
            raise ValueError("Event names must be non-empty strings")
        return [event.strip() for event in value]

    def __repr__(self):
        return f"<Registration id={self.id} email={self.email!r}>"
