from sqlalchemy.exc import IntegrityError, OperationalError

from database.models import Registration
from services import registration_service


def test_register_and_get_returns_stored_fields(client, auth_headers, make_payload):
    payload = make_payload()

    response = client.post("/api/register", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Registration successful"
    assert body["registration"]["email"] == "a@x.com"
    assert body["registration"]["name"] == "A"
    assert set(body["registration"]) == {"id", "email", "name"}

    detail = client.get(f"/api/registrations/{body['registration']['id']}", headers=auth_headers)
    assert detail.status_code == 200
    stored = detail.json()
    for field, value in payload.items():
        assert stored[field] == value
    assert stored["id"] == body["registration"]["id"]
    assert stored["created_at"]


def test_duplicate_transaction_id_is_rejected(client, make_payload):
    assert client.post("/api/register", json=make_payload()).status_code == 201

    response = client.post("/api/register", json=make_payload(email="b@x.com"))

    assert response.status_code == 400
    assert response.json()["detail"] == "transaction_id already registered"


def test_duplicate_email_is_rejected(client, make_payload):
    assert client.post("/api/register", json=make_payload()).status_code == 201

    response = client.post("/api/register", json=make_payload(transaction_id="TXN2"))

    assert response.status_code == 400
    assert response.json()["detail"] == "email already registered"


def test_email_is_normalized_before_duplicate_check(client, make_payload):
    assert client.post("/api/register", json=make_payload(email="  A@X.com ")).status_code == 201

    response = client.post("/api/register", json=make_payload(email="a@x.com", transaction_id="TXN2"))

    assert response.status_code == 400
    assert response.json()["detail"] == "email already registered"


def test_unique_index_catches_duplicate_missed_by_precheck(client, db, make_payload, monkeypatch):
    assert client.post("/api/register", json=make_payload()).status_code == 201
    # Конкурентный запрос: быстрая проверка ещё не видит первую запись
    monkeypatch.setattr(registration_service, "find_existing", lambda *args: None)

    by_email = client.post("/api/register", json=make_payload(transaction_id="TXN2"))
    by_transaction = client.post("/api/register", json=make_payload(email="b@x.com"))

    assert by_email.status_code == 400
    assert by_email.json()["detail"] == "email already registered"
    assert by_transaction.status_code == 400
    assert by_transaction.json()["detail"] == "transaction_id already registered"
    assert db.query(Registration).count() == 1


class _DriverError(Exception):
    """Ошибка драйвера с необязательным diag.constraint_name (как у psycopg)"""

    def __init__(self, message, constraint_name=None):
        super().__init__(message)
        if constraint_name:
            self.diag = type("Diag", (), {"constraint_name": constraint_name})()


def _integrity_error(message, constraint_name=None):
    return IntegrityError("INSERT INTO registrations", {}, _DriverError(message, constraint_name))


def test_conflicting_field_ignores_values_in_driver_message():
    values = {"email": "b@x.com", "transaction_id": "email-TX9"}
    postgres = _integrity_error(
        'duplicate key value violates unique constraint "ix_registrations_transaction_id"\n'
        "DETAIL:  Key (transaction_id)=(email-TX9) already exists."
    )
    mysql = _integrity_error(
        "(1062, \"Duplicate entry 'email-TX9' for key 'registrations.ix_registrations_transaction_id'\")"
    )

    assert registration_service._conflicting_field(None, postgres, values) == "transaction_id"
    assert registration_service._conflicting_field(None, mysql, values) == "transaction_id"


def test_conflicting_field_prefers_constraint_name():
    values = {"email": "email@x.com", "transaction_id": "TX9"}
    error = _integrity_error(
        "Key (email)=(email@x.com) already exists.",
        constraint_name="ix_registrations_email",
    )

    assert registration_service._conflicting_field(None, error, values) == "email"


def test_conflicting_field_falls_back_to_lookup(client, db, make_payload):
    assert client.post("/api/register", json=make_payload()).status_code == 201
    values = {"email": "b@x.com", "transaction_id": "TXN1"}

    field = registration_service._conflicting_field(db, _integrity_error("constraint violated"), values)

    assert field == "transaction_id"


def test_empty_selected_events_rejected_before_write(client, db, make_payload):
    response = client.post("/api/register", json=make_payload(selected_events=[]))

    assert response.status_code == 400
    assert response.json()["detail"] == "All fields are required"
    assert db.query(Registration).count() == 0


def test_missing_field_rejected(client, db, make_payload):
    payload = make_payload()
    del payload["college_name"]

    response = client.post("/api/register", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "All fields are required"
    assert db.query(Registration).count() == 0


def test_blank_field_rejected(client, db, make_payload):
    response = client.post("/api/register", json=make_payload(name="   "))

    assert response.status_code == 400
    assert response.json()["detail"] == "name is required"
    assert db.query(Registration).count() == 0


def test_whatsapp_number_must_have_ten_digits(client, db, make_payload):
    for number in ("987654321", "98765432101", "98765abcde", "\u0669\u0668\u0667\u0666\u0665\u0664\u0663\u0662\u0661\u0660"):
        response = client.post("/api/register", json=make_payload(whatsapp_number=number))
        assert response.status_code == 400
        assert response.json()["detail"] == "Please provide a valid 10-digit phone number"

    assert db.query(Registration).count() == 0


def test_invalid_email_rejected(client, db, make_payload):
    for email in ("not-an-email", "\u00e9@x.com", "a@x.c\u00f3m", "a@x.com\nb"):
        response = client.post("/api/register", json=make_payload(email=email))
        assert response.status_code == 400
        assert response.json()["detail"] == "Please provide a valid email"

    assert db.query(Registration).count() == 0


def test_events_outside_the_list_are_accepted(client, make_payload):
    response = client.post("/api/register", json=make_payload(selected_events=["Quiz", "Hackathon"]))

    assert response.status_code == 201


def test_storage_fault_returns_generic_error(client, make_payload, monkeypatch):
    def broken(*args):
        raise OperationalError("SELECT", {}, Exception("disk I/O error at /var/db"))

    monkeypatch.setattr(registration_service, "find_existing", broken)

    response = client.post("/api/register", json=make_payload())

    assert response.status_code == 500
    assert response.json()["detail"] == "Registration failed"
    assert "/var/db" not in response.text


def test_list_omits_payment_proof_url(client, auth_headers, make_payload):
    client.post("/api/register", json=make_payload())
    client.post("/api/register", json=make_payload(email="b@x.com", transaction_id="TXN2"))

    response = client.get("/api/registrations", headers=auth_headers)

    assert response.status_code == 200
    records = response.json()
    assert len(records) == 2
    assert {record["email"] for record in records} == {"a@x.com", "b@x.com"}
    for record in records:
        assert "payment_proof_url" not in record
        assert "http://h/u/f.pdf" not in record.values()


def test_get_unknown_registration_returns_404(client, auth_headers):
    response = client.get("/api/registrations/999", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Registration not found"


def test_get_malformed_id_is_client_error(client, auth_headers):
    response = client.get("/api/registrations/not-a-number", headers=auth_headers)

    assert response.status_code == 422


def test_events_and_health(client):
    assert client.get("/health").json() == {"status": "ok"}

    events = client.get("/api/events/").json()["events"]
    assert len(events) == 6
    assert "Quiz" in events
