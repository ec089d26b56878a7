"""Response schemas shared by the HTTP routes.

Bodies are serialized in camelCase to match the browser client.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from resolveit.db.models.case import Case
from resolveit.db.models.user import User


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AddressResponse(CamelModel):
    street: str
    city: str
    zip: str


class UserResponse(CamelModel):
    id: str
    name: str
    age: int
    gender: str
    address: AddressResponse
    email: str
    phone: str
    photo: str | None
    created_at: datetime


class UserSummary(CamelModel):
    id: str
    name: str
    email: str
    phone: str


class OppositePartyResponse(CamelModel):
    name: str
    contact: str
    address: str
    has_accepted: bool
    notified_at: datetime | None
    response_deadline: datetime | None


class CourtPendingResponse(CamelModel):
    is_pending: bool
    case_number: str | None
    fir_number: str | None
    court_or_police_name: str | None


class WitnessResponse(CamelModel):
    name: str
    contact: str | None
    role: str | None
    nominated_by: str | None


class PanelMemberResponse(CamelModel):
    name: str
    expertise: str
    contact: str | None
    assigned_at: datetime


class MediationSessionResponse(CamelModel):
    scheduled_at: datetime
    status: str
    notes: str | None
    attendees: list[str]


class ResolutionResponse(CamelModel):
    is_resolved: bool
    agreement: str | None
    resolved_at: datetime | None
    satisfaction_level: int | None


class CaseResponse(CamelModel):
    id: str
    case_type: str
    issue_description: str
    party: UserSummary | None
    opposite_party: OppositePartyResponse
    proof: list[str]
    court_pending: CourtPendingResponse | None
    status: str
    witnesses: list[WitnessResponse]
    panel: list[PanelMemberResponse]
    mediation_sessions: list[MediationSessionResponse]
    resolution: ResolutionResponse
    created_at: datetime
    updated_at: datetime


class CaseEnvelope(CamelModel):
    message: str
    case: CaseResponse


class CaseFiledResponse(CaseEnvelope):
    verification_status: str
    notification: str


class UserRegisteredResponse(CamelModel):
    message: str
    user: UserResponse


def user_to_response(u: User) -> UserResponse:
    return UserResponse(
        id=str(u.id),
        name=u.name,
        age=u.age,
        gender=u.gender,
        address=AddressResponse(street=u.street, city=u.city, zip=u.zip_code),
        email=u.email,
        phone=u.phone,
        photo=u.photo,
        created_at=u.created_at,
    )


def user_to_summary(u: User) -> UserSummary:
    return UserSummary(id=str(u.id), name=u.name, email=u.email, phone=u.phone)


def case_to_response(c: Case) -> CaseResponse:
    """Convert a Case ORM instance (with children loaded) to a CaseResponse."""
    court = None
    if c.court_is_pending is not None:
        court = CourtPendingResponse(
            is_pending=c.court_is_pending,
            case_number=c.court_case_number,
            fir_number=c.court_fir_number,
            court_or_police_name=c.court_or_police_name,
        )

    return CaseResponse(
        id=str(c.id),
        case_type=c.case_type,
        issue_description=c.issue_description,
        party=user_to_summary(c.party) if c.party else None,
        opposite_party=OppositePartyResponse(
            name=c.opposite_party_name,
            contact=c.opposite_party_contact,
            address=c.opposite_party_address,
            has_accepted=c.opposite_party_has_accepted,
            notified_at=c.opposite_party_notified_at,
            response_deadline=c.response_deadline,
        ),
        proof=list(c.proof or []),
        court_pending=court,
        status=c.status,
        witnesses=[
            WitnessResponse(
                name=w.name, contact=w.contact, role=w.role, nominated_by=w.nominated_by
            )
            for w in c.witnesses
        ],
        panel=[
            PanelMemberResponse(
                name=p.name, expertise=p.expertise, contact=p.contact, assigned_at=p.assigned_at
            )
            for p in c.panel
        ],
        mediation_sessions=[
            MediationSessionResponse(
                scheduled_at=s.scheduled_at,
                status=s.status,
                notes=s.notes,
                attendees=list(s.attendees or []),
            )
            for s in c.mediation_sessions
        ],
        resolution=ResolutionResponse(
            is_resolved=c.is_resolved,
            agreement=c.agreement,
            resolved_at=c.resolved_at,
            satisfaction_level=c.satisfaction_level,
        ),
        created_at=c.created_at,
        updated_at=c.updated_at,
    )
