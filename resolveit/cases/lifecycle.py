"""Case lifecycle service — registration and workflow transitions.

Status flow:

    Queued -> Awaiting Response            (scheduled, after the notification delay)
    * -> Accepted/Rejected                 (opposite party responds)
    * -> Panel Created                     (panel formed; not after resolution)
    * -> Mediation in Progress             (session scheduled)
    * -> Resolved                          (agreement recorded)
    * -> any status                        (administrator override)

Every operation validates its input before touching the database, commits,
and only then publishes the status change.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from resolveit.config import settings
from resolveit.core.exceptions import ConflictError, NotFoundError
from resolveit.core.logging import log
from resolveit.cases import validation
from resolveit.cases.panel import enforce_panel_composition
from resolveit.cases.repository import (
    DUPLICATE_EMAIL_ERROR,
    CaseRepository,
    UserRepository,
    storage_errors,
)
from resolveit.db.models.case import Case, CaseStatus
from resolveit.db.models.mediation_session import MediationSession, SessionStatus
from resolveit.db.models.panel_member import PanelMember
from resolveit.db.models.user import User
from resolveit.db.models.witness import Witness
from resolveit.events.broadcaster import EventBroadcaster
from resolveit.events.notify import publish_status_change
from resolveit.tasks.scheduler import TransitionScheduler

CLOSED_STATUSES = {CaseStatus.RESOLVED.value, CaseStatus.UNRESOLVED.value}


@dataclass
class FilingNotice:
    """What the filing party is told after registering a case."""
    verification_status: str
    notification: str


def _now() -> datetime:
    return datetime.now(timezone.utc)


def verification_status(case: Case) -> str:
    if case.court_is_pending:
        number = case.court_case_number or case.court_fir_number
        return f"Pending in {case.court_or_police_name} (Case/FIR: {number})"
    return "Not Pending"


class CaseLifecycleService:
    """Owns case registration and every status transition."""

    def __init__(
        self,
        db: AsyncSession,
        scheduler: TransitionScheduler,
        broadcaster: EventBroadcaster,
    ):
        self.db = db
        self.scheduler = scheduler
        self.broadcaster = broadcaster
        self.users = UserRepository(db)
        self.cases = CaseRepository(db)

    # ─── Users ───────────────────────────────────────

    async def register_user(self, raw: Any) -> User:
        """Register a disputant; each email may register once."""
        record = validation.validate_user_input(raw).unwrap()

        if await self.users.get_by_email(record.email):
            raise ConflictError(DUPLICATE_EMAIL_ERROR)

        user = await self.users.add(
            User(
                name=record.name,
                age=record.age,
                gender=record.gender.value,
                street=record.address.street,
                city=record.address.city,
                zip_code=record.address.zip,
                email=record.email,
                phone=record.phone,
                photo=record.photo,
            )
        )
        await self._commit("register user")
        log.info(f"Registered user {user.id}")
        return user

    async def list_users(self) -> list[User]:
        return await self.users.list_all()

    # ─── Cases ───────────────────────────────────────

    async def register_case(self, raw: Any) -> tuple[Case, FilingNotice]:
        """File a case in Queued and schedule the move to Awaiting Response."""
        record = validation.validate_case_input(raw).unwrap()

        party = await self.users.get(record.party_id)
        if not party:
            raise NotFoundError("Party (user)", str(record.party_id))

        now = _now()
        deadline = now + timedelta(days=settings.RESPONSE_DEADLINE_DAYS)
        court = record.court_pending

        case = Case(
            id=uuid.uuid4(),
            case_type=record.case_type.value,
            issue_description=record.issue_description,
            party=party,
            opposite_party_name=record.opposite_party.name,
            opposite_party_contact=record.opposite_party.contact,
            opposite_party_address=record.opposite_party.address,
            opposite_party_has_accepted=False,
            opposite_party_notified_at=now,
            response_deadline=deadline,
            proof=list(record.proof),
            court_is_pending=court.is_pending if court else None,
            court_case_number=court.case_number if court else None,
            court_fir_number=court.fir_number if court else None,
            court_or_police_name=court.court_or_police_name if court else None,
            status=CaseStatus.QUEUED.value,
            is_resolved=False,
            witnesses=[],
            panel=[],
            mediation_sessions=[],
            created_at=now,
            updated_at=now,
        )
        await self.cases.add(case)

        jobs = [
            self.scheduler.schedule(
                self.db,
                case.id,
                CaseStatus.QUEUED.value,
                CaseStatus.AWAITING_RESPONSE.value,
                now + timedelta(seconds=settings.NOTIFICATION_DELAY_SECONDS),
                reason="notification",
            )
        ]
        if settings.get("ENFORCE_RESPONSE_DEADLINE", False):
            jobs.append(
                self.scheduler.schedule(
                    self.db,
                    case.id,
                    CaseStatus.AWAITING_RESPONSE.value,
                    CaseStatus.UNRESOLVED.value,
                    deadline,
                    reason="response_deadline",
                )
            )
        await self._commit("register case")

        for job in jobs:
            self.scheduler.arm(job.id, job.due_at)

        log.info(f"Registered case {case.id} ({case.case_type}) for party {party.id}")
        notice = FilingNotice(
            verification_status=verification_status(case),
            notification=(
                f"Opposite party {case.opposite_party_name} will be notified for "
                f"mediation. Response deadline: {deadline.date().isoformat()}"
            ),
        )
        return case, notice

    async def get_case(self, case_id: str | uuid.UUID) -> Case:
        identifier = validation.parse_identifier(case_id)
        case = await self.cases.get(identifier) if identifier else None
        if not case:
            raise NotFoundError("Case", str(case_id))
        return case

    async def list_cases(
        self,
        status: str | None = None,
        case_type: str | None = None,
    ) -> list[Case]:
        return await self.cases.find(status=status, case_type=case_type)

    # ─── Workflow ────────────────────────────────────

    async def record_opposite_party_response(self, case_id: str, raw: Any) -> Case:
        """Opposite party accepts or rejects mediation.

        Accepted in any status, so an answer can also reopen a case. A
        pending notification job is skipped once the case has left Queued.
        """
        response = validation.validate_opposite_party_response(raw).unwrap()
        case = await self.get_case(case_id)

        case.opposite_party_has_accepted = response.accepted
        status = CaseStatus.ACCEPTED if response.accepted else CaseStatus.REJECTED
        await self._transition(
            case,
            status,
            "record response",
            oppositePartyResponse=response.accepted,
            reason=response.reason,
        )
        return case

    async def nominate_witnesses(self, case_id: str, raw: Any) -> Case:
        """Append witnesses in the order given. Status is unchanged."""
        records = validation.validate_witnesses(raw).unwrap()
        case = await self.get_case(case_id)

        start = len(case.witnesses)
        for offset, record in enumerate(records):
            case.witnesses.append(
                Witness(
                    position=start + offset,
                    name=record.name,
                    contact=record.contact,
                    role=record.role,
                    nominated_by=record.nominated_by.value if record.nominated_by else None,
                )
            )
        case.updated_at = _now()
        await self.cases.save(case, "nominate witnesses")
        await self._commit("nominate witnesses")
        log.info(f"Case {case.id}: {len(records)} witness(es) nominated")
        return case

    async def form_panel(self, case_id: str, raw: Any) -> Case:
        """Replace the panel after checking its composition."""
        members = validation.validate_panel_members(raw).unwrap()
        enforce_panel_composition(members)
        case = await self.get_case(case_id)

        if case.status in CLOSED_STATUSES:
            raise ConflictError(f"Cannot form a panel for a case that is '{case.status}'")

        now = _now()
        case.panel = [
            PanelMember(
                position=index,
                name=member.name,
                expertise=member.expertise,
                contact=member.contact,
                assigned_at=now,
            )
            for index, member in enumerate(members)
        ]
        await self._transition(
            case, CaseStatus.PANEL_CREATED, "form panel", panelCreated=True
        )
        return case

    async def schedule_mediation(self, case_id: str, raw: Any) -> Case:
        """Append a mediation session and move to Mediation in Progress."""
        request = validation.validate_mediation_request(raw).unwrap()
        case = await self.get_case(case_id)

        case.mediation_sessions.append(
            MediationSession(
                position=len(case.mediation_sessions),
                scheduled_at=request.scheduled_at,
                status=SessionStatus.SCHEDULED.value,
                notes=request.notes,
                attendees=list(request.attendees),
            )
        )
        await self._transition(
            case,
            CaseStatus.MEDIATION_IN_PROGRESS,
            "schedule mediation",
            mediationScheduled=True,
            scheduledAt=request.scheduled_at.isoformat(),
        )
        return case

    async def resolve(self, case_id: str, raw: Any) -> Case:
        """Record the agreement and close the case as Resolved."""
        resolution = validation.validate_resolution(raw).unwrap()
        case = await self.get_case(case_id)

        case.is_resolved = True
        case.agreement = resolution.agreement
        case.resolved_at = _now()
        case.satisfaction_level = resolution.satisfaction_level
        await self._transition(case, CaseStatus.RESOLVED, "resolve case", resolved=True)
        return case

    async def override_status(self, case_id: str, raw: Any) -> Case:
        """Set any workflow status directly.

        Only enum membership is checked; the transition table above is not
        enforced here.
        """
        status = validation.validate_status_override(raw).unwrap()
        case = await self.get_case(case_id)
        previous = case.status
        await self._transition(
            case, status, "override status", workflowUpdate=True, previousStatus=previous
        )
        return case

    # ─── Statistics ──────────────────────────────────

    async def dashboard_stats(self) -> dict[str, Any]:
        by_status = await self.cases.count_by_status()
        return {
            "totalCases": await self.cases.count(),
            "statusDistribution": {
                "queued": by_status.get(CaseStatus.QUEUED.value, 0),
                "awaitingResponse": by_status.get(CaseStatus.AWAITING_RESPONSE.value, 0),
                "accepted": by_status.get(CaseStatus.ACCEPTED.value, 0),
                "rejected": by_status.get(CaseStatus.REJECTED.value, 0),
                "panelCreated": by_status.get(CaseStatus.PANEL_CREATED.value, 0),
                "inProgress": by_status.get(CaseStatus.MEDIATION_IN_PROGRESS.value, 0),
                "resolved": await self.cases.count_resolved(),
                "unresolved": by_status.get(CaseStatus.UNRESOLVED.value, 0),
            },
            "casesByType": await self.cases.count_by_type(),
        }

    # ─── Internals ───────────────────────────────────

    async def _transition(
        self,
        case: Case,
        status: CaseStatus,
        operation: str,
        **metadata: Any,
    ) -> None:
        previous = case.status
        case.status = status.value
        case.updated_at = _now()
        await self.cases.save(case, operation)
        await self._commit(operation)
        log.info(f"Case {case.id}: {previous} -> {case.status} ({operation})")
        await publish_status_change(self.broadcaster, case.id, case.status, **metadata)
        if case.status in CLOSED_STATUSES:
            await self.scheduler.cancel_pending(case.id)

    async def _commit(self, operation: str) -> None:
        async with storage_errors(operation):
            await self.db.commit()
