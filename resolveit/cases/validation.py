"""Input validation for disputants, cases and workflow actions.

Each validator takes the raw decoded JSON body and returns a
ValidationResult: either a normalized record or the list of field
errors. Nothing here touches the database.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import re
from typing import Any, Generic, TypeVar
import uuid

from pydantic import BaseModel

from resolveit.core.exceptions import ValidationError
from resolveit.db.models.case import CaseStatus, CaseType
from resolveit.db.models.user import Gender
from resolveit.db.models.witness import NominatedBy

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\d{10,15}$")
UNSAFE_CHARS = re.compile(r"[<>$]")

MIN_SATISFACTION = 1
MAX_SATISFACTION = 5


class FieldError(BaseModel):
    field: str
    message: str


@dataclass
class ValidationResult(Generic[T]):
    record: T | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> T:
        """Return the record, or raise one ValidationError listing every failure."""
        if self.errors:
            messages = dict.fromkeys(e.message for e in self.errors)
            raise ValidationError(
                " ".join(messages),
                details={"errors": [e.model_dump() for e in self.errors]},
            )
        return self.record


# ─── Records ─────────────────────────────────────────

class AddressRecord(BaseModel):
    street: str
    city: str
    zip: str


class UserRecord(BaseModel):
    name: str
    age: int
    gender: Gender
    address: AddressRecord
    email: str
    phone: str
    photo: str | None = None


class OppositePartyRecord(BaseModel):
    name: str
    contact: str
    address: str


class CourtPendingRecord(BaseModel):
    is_pending: bool
    case_number: str | None = None
    fir_number: str | None = None
    court_or_police_name: str | None = None


class CaseRecord(BaseModel):
    case_type: CaseType
    issue_description: str
    party_id: uuid.UUID
    opposite_party: OppositePartyRecord
    proof: list[str] = []
    court_pending: CourtPendingRecord | None = None


class WitnessRecord(BaseModel):
    name: str
    contact: str | None = None
    role: str | None = None
    nominated_by: NominatedBy | None = None


class PanelMemberRecord(BaseModel):
    name: str
    expertise: str
    contact: str | None = None


class MediationRequest(BaseModel):
    scheduled_at: datetime
    attendees: list[str] = []
    notes: str | None = None


class ResolutionRecord(BaseModel):
    agreement: str | None = None
    satisfaction_level: int | None = None


class OppositePartyResponse(BaseModel):
    accepted: bool
    reason: str | None = None


# ─── Helpers ─────────────────────────────────────────

def sanitize(value: Any) -> Any:
    """Strip markup/template characters from strings; other values pass through."""
    if isinstance(value, str):
        return UNSAFE_CHARS.sub("", value).strip()
    return value


def _digits_as_text(value: Any) -> Any:
    """JSON numbers for zip codes and phone numbers are taken as their digits."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _text(raw: dict[str, Any], key: str) -> str | None:
    """Stripped string value, or None if absent, blank or not a string."""
    value = raw.get(key)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_body(raw: Any) -> dict[str, Any] | None:
    return raw if isinstance(raw, dict) else None


def _body_error() -> ValidationResult:
    return ValidationResult(errors=[FieldError(field="body", message="Request body must be a JSON object.")])


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_identifier(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None


# ─── Users ───────────────────────────────────────────

USER_REQUIRED_FIELDS = ("name", "age", "gender", "address", "email", "phone")


def validate_user_input(raw: Any) -> ValidationResult[UserRecord]:
    """Validate a disputant registration."""
    body = _as_body(raw)
    if body is None:
        return _body_error()

    data = {key: sanitize(value) for key, value in body.items()}
    errors: list[FieldError] = []

    for key in USER_REQUIRED_FIELDS:
        if _is_missing(data.get(key)):
            errors.append(FieldError(field=key, message="All fields are required."))
    missing = {e.field for e in errors}

    age = data.get("age")
    if "age" not in missing and (
        isinstance(age, bool) or not isinstance(age, int) or age <= 0
    ):
        errors.append(FieldError(field="age", message="Age must be a positive number."))

    gender = data.get("gender")
    if "gender" not in missing and (
        not isinstance(gender, str) or gender not in {g.value for g in Gender}
    ):
        errors.append(
            FieldError(field="gender", message="Gender must be Male, Female, or Other.")
        )

    address = data.get("address")
    if "address" not in missing:
        parts = (
            {
                key: sanitize(_digits_as_text(address.get(key)))
                for key in ("street", "city", "zip")
            }
            if isinstance(address, dict)
            else {}
        )
        if not parts or any(
            not isinstance(v, str) or not v for v in parts.values()
        ):
            errors.append(
                FieldError(field="address", message="Complete address is required.")
            )
        else:
            address = parts

    email = data.get("email")
    if "email" not in missing and (
        not isinstance(email, str) or not EMAIL_PATTERN.match(email)
    ):
        errors.append(FieldError(field="email", message="Invalid email format."))

    phone = _digits_as_text(data.get("phone"))
    if "phone" not in missing and (
        not isinstance(phone, str) or not PHONE_PATTERN.match(phone)
    ):
        errors.append(FieldError(field="phone", message="Invalid phone number."))

    name = data.get("name")
    if "name" not in missing and not isinstance(name, str):
        errors.append(FieldError(field="name", message="Name must be text."))

    photo = data.get("photo")
    if photo is not None and not isinstance(photo, str):
        errors.append(FieldError(field="photo", message="Photo must be a file reference."))

    if errors:
        return ValidationResult(errors=errors)

    return ValidationResult(
        record=UserRecord(
            name=name,
            age=age,
            gender=Gender(gender),
            address=AddressRecord(**address),
            email=email,
            phone=phone,
            photo=photo or None,
        )
    )


# ─── Cases ───────────────────────────────────────────

CASE_REQUIRED_FIELDS = ("caseType", "issueDescription", "partyId", "oppositeParty")


def validate_case_input(raw: Any) -> ValidationResult[CaseRecord]:
    """Validate a case filing."""
    body = _as_body(raw)
    if body is None:
        return _body_error()

    errors: list[FieldError] = []
    for key in CASE_REQUIRED_FIELDS:
        value = body.get(key)
        if _is_missing(value) or value == {}:
            errors.append(FieldError(field=key, message="All fields are required."))
    missing = {e.field for e in errors}

    case_type = body.get("caseType")
    if "caseType" not in missing and (
        not isinstance(case_type, str) or case_type not in {t.value for t in CaseType}
    ):
        errors.append(FieldError(field="caseType", message="Invalid case type."))

    description = body.get("issueDescription")
    if "issueDescription" not in missing and (
        not isinstance(description, str) or not description.strip()
    ):
        errors.append(
            FieldError(field="issueDescription", message="Issue description is required.")
        )

    party_id = None
    if "partyId" not in missing:
        party_id = parse_identifier(body.get("partyId"))
        if party_id is None:
            errors.append(FieldError(field="partyId", message="Invalid party id."))

    opposite = body.get("oppositeParty")
    if "oppositeParty" not in missing:
        if not isinstance(opposite, dict) or not all(
            _text(opposite, key) for key in ("name", "contact", "address")
        ):
            errors.append(
                FieldError(
                    field="oppositeParty",
                    message="Complete opposite party details are required.",
                )
            )

    proof = body.get("proof")
    if proof is not None:
        if not isinstance(proof, list):
            errors.append(FieldError(field="proof", message="Proof must be an array."))
        elif not all(isinstance(p, str) and p for p in proof):
            errors.append(
                FieldError(field="proof", message="Proof entries must be file references.")
            )

    court_pending = None
    raw_court = body.get("courtPending")
    if raw_court is not None:
        if (
            not isinstance(raw_court, dict)
            or not isinstance(raw_court.get("isPending"), bool)
            or (
                raw_court["isPending"]
                and not (_text(raw_court, "caseNumber") and _text(raw_court, "courtOrPoliceName"))
            )
        ):
            errors.append(
                FieldError(field="courtPending", message="Court/police info is incomplete.")
            )
        else:
            court_pending = CourtPendingRecord(
                is_pending=raw_court["isPending"],
                case_number=_text(raw_court, "caseNumber"),
                fir_number=_text(raw_court, "firNumber"),
                court_or_police_name=_text(raw_court, "courtOrPoliceName"),
            )

    if errors:
        return ValidationResult(errors=errors)

    return ValidationResult(
        record=CaseRecord(
            case_type=CaseType(case_type),
            issue_description=description.strip(),
            party_id=party_id,
            opposite_party=OppositePartyRecord(
                name=_text(opposite, "name"),
                contact=_text(opposite, "contact"),
                address=_text(opposite, "address"),
            ),
            proof=proof or [],
            court_pending=court_pending,
        )
    )


# ─── Workflow actions ────────────────────────────────

def validate_opposite_party_response(raw: Any) -> ValidationResult[OppositePartyResponse]:
    body = _as_body(raw)
    if body is None:
        return _body_error()
    accepted = body.get("accepted")
    if not isinstance(accepted, bool):
        return ValidationResult(
            errors=[FieldError(field="accepted", message="accepted must be true or false.")]
        )
    reason = body.get("reason")
    return ValidationResult(
        record=OppositePartyResponse(
            accepted=accepted,
            reason=reason.strip() if isinstance(reason, str) and reason.strip() else None,
        )
    )


def validate_witnesses(raw: Any) -> ValidationResult[list[WitnessRecord]]:
    """Validate a witness nomination list."""
    body = _as_body(raw)
    if body is None:
        return _body_error()

    witnesses = body.get("witnesses")
    if not isinstance(witnesses, list) or not witnesses:
        return ValidationResult(
            errors=[FieldError(field="witnesses", message="Witnesses must be a non-empty array.")]
        )

    errors: list[FieldError] = []
    records: list[WitnessRecord] = []
    allowed = {n.value for n in NominatedBy}
    for index, item in enumerate(witnesses):
        prefix = f"witnesses[{index}]"
        if not isinstance(item, dict) or not _text(item, "name"):
            errors.append(FieldError(field=f"{prefix}.name", message="Witness name is required."))
            continue
        nominated_by = item.get("nominatedBy")
        if nominated_by is not None and (
            not isinstance(nominated_by, str) or nominated_by not in allowed
        ):
            errors.append(
                FieldError(
                    field=f"{prefix}.nominatedBy",
                    message="nominatedBy must be party or oppositeParty.",
                )
            )
            continue
        records.append(
            WitnessRecord(
                name=_text(item, "name"),
                contact=_text(item, "contact"),
                role=_text(item, "role"),
                nominated_by=nominated_by,
            )
        )

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(record=records)


def validate_panel_members(raw: Any) -> ValidationResult[list[PanelMemberRecord]]:
    """Shape check for a panel; composition is checked by cases.panel."""
    body = _as_body(raw)
    if body is None:
        return _body_error()

    panel = body.get("panel")
    if not isinstance(panel, list) or not panel:
        return ValidationResult(
            errors=[FieldError(field="panel", message="Panel must be a non-empty array.")]
        )

    errors: list[FieldError] = []
    records: list[PanelMemberRecord] = []
    for index, item in enumerate(panel):
        prefix = f"panel[{index}]"
        if not isinstance(item, dict):
            errors.append(FieldError(field=prefix, message="Panel member must be an object."))
            continue
        if not _text(item, "name"):
            errors.append(FieldError(field=f"{prefix}.name", message="Panel member name is required."))
        if not _text(item, "expertise"):
            errors.append(
                FieldError(field=f"{prefix}.expertise", message="Panel member expertise is required.")
            )
        if _text(item, "name") and _text(item, "expertise"):
            records.append(
                PanelMemberRecord(
                    name=_text(item, "name"),
                    expertise=_text(item, "expertise"),
                    contact=_text(item, "contact"),
                )
            )

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(record=records)


def validate_mediation_request(raw: Any) -> ValidationResult[MediationRequest]:
    body = _as_body(raw)
    if body is None:
        return _body_error()

    errors: list[FieldError] = []
    scheduled_at = parse_datetime(body.get("scheduledAt"))
    if scheduled_at is None:
        errors.append(
            FieldError(field="scheduledAt", message="scheduledAt must be an ISO-8601 date-time.")
        )

    attendees = body.get("attendees", [])
    if attendees is None:
        attendees = []
    if not isinstance(attendees, list) or not all(isinstance(a, str) for a in attendees):
        errors.append(FieldError(field="attendees", message="Attendees must be an array of names."))

    notes = body.get("notes")
    if notes is not None and not isinstance(notes, str):
        errors.append(FieldError(field="notes", message="Notes must be text."))

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(
        record=MediationRequest(
            scheduled_at=scheduled_at,
            attendees=[a.strip() for a in attendees if a.strip()],
            notes=notes,
        )
    )


def validate_resolution(raw: Any) -> ValidationResult[ResolutionRecord]:
    body = _as_body(raw)
    if body is None:
        return _body_error()

    errors: list[FieldError] = []
    agreement = body.get("agreement")
    if agreement is not None and not isinstance(agreement, str):
        errors.append(FieldError(field="agreement", message="Agreement must be text."))

    level = body.get("satisfactionLevel")
    if level is not None and (
        isinstance(level, bool)
        or not isinstance(level, int)
        or not MIN_SATISFACTION <= level <= MAX_SATISFACTION
    ):
        errors.append(
            FieldError(
                field="satisfactionLevel",
                message=f"Satisfaction level must be between {MIN_SATISFACTION} and {MAX_SATISFACTION}.",
            )
        )

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(
        record=ResolutionRecord(agreement=agreement, satisfaction_level=level)
    )


def validate_status_override(raw: Any) -> ValidationResult[CaseStatus]:
    body = _as_body(raw)
    if body is None:
        return _body_error()
    status = body.get("status")
    if not isinstance(status, str) or status not in {s.value for s in CaseStatus}:
        return ValidationResult(errors=[FieldError(field="status", message="Invalid status")])
    return ValidationResult(record=CaseStatus(status))
