"""
Tests for the case lifecycle service
====================================

Tests for:
- User registration and email uniqueness
- Case filing (initial state, notice, scheduled transition)
- Opposite-party response, witnesses, panel, mediation, resolution
- Administrator status override
- Dashboard statistics
- Status-change events
"""

import uuid

import pytest
from sqlalchemy import func, select

from resolveit.config import settings
from resolveit.core.exceptions import ConflictError, NotFoundError, ValidationError
from resolveit.db.models import Case, CaseStatus, ScheduledTransition, TransitionState, User
from resolveit.events.broadcaster import DASHBOARD_TOPIC, case_topic

from tests.conftest import VALID_PANEL, make_case_payload, make_user_payload


async def count_rows(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar()


async def reload_case(session_factory, case_id) -> Case:
    async with session_factory() as session:
        return await session.get(Case, case_id)


# =============================================================================
# Users
# =============================================================================

class TestUserRegistration:

    @pytest.mark.asyncio
    async def test_register_user(self, lifecycle):
        user = await lifecycle.register_user(make_user_payload())
        assert user.id is not None
        assert user.zip_code == "500034"
        assert [u.email for u in await lifecycle.list_users()] == ["ayesha.khan@example.org"]

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, lifecycle, session_factory):
        await lifecycle.register_user(make_user_payload())
        with pytest.raises(ConflictError) as exc:
            await lifecycle.register_user(make_user_payload(name="Someone Else"))
        assert exc.value.status_code == 409
        assert await count_rows(session_factory, User) == 1

    @pytest.mark.asyncio
    async def test_invalid_user_not_persisted(self, lifecycle, session_factory):
        with pytest.raises(ValidationError):
            await lifecycle.register_user(make_user_payload(email="bad"))
        assert await count_rows(session_factory, User) == 0


# =============================================================================
# Case filing
# =============================================================================

class TestCaseFiling:

    @pytest.mark.asyncio
    async def test_new_case_is_queued_with_deadline(self, lifecycle, registered_user):
        case, notice = await lifecycle.register_case(make_case_payload(str(registered_user.id)))

        assert case.status == CaseStatus.QUEUED.value
        assert case.opposite_party_has_accepted is False
        assert case.opposite_party_notified_at is not None
        delta = case.response_deadline - case.opposite_party_notified_at
        assert delta.days == settings.RESPONSE_DEADLINE_DAYS
        assert case.party.id == registered_user.id
        assert notice.verification_status == "Not Pending"
        assert "Imran Khan" in notice.notification

    @pytest.mark.asyncio
    async def test_filing_schedules_notification_transition(
        self, lifecycle, registered_user, scheduler, session_factory
    ):
        case, _ = await lifecycle.register_case(make_case_payload(str(registered_user.id)))

        async with session_factory() as session:
            jobs = (
                await session.execute(
                    select(ScheduledTransition).where(ScheduledTransition.case_id == case.id)
                )
            ).scalars().all()
        assert len(jobs) == 1
        assert jobs[0].from_status == CaseStatus.QUEUED.value
        assert jobs[0].to_status == CaseStatus.AWAITING_RESPONSE.value
        assert jobs[0].state == TransitionState.PENDING.value
        assert scheduler.armed_count == 1

    @pytest.mark.asyncio
    async def test_pending_court_verification_status(self, lifecycle, registered_user):
        _, notice = await lifecycle.register_case(
            make_case_payload(
                str(registered_user.id),
                courtPending={
                    "isPending": True,
                    "caseNumber": "CS-118/2026",
                    "courtOrPoliceName": "City Court",
                },
            )
        )
        assert notice.verification_status == "Pending in City Court (Case/FIR: CS-118/2026)"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["caseType", "issueDescription", "partyId", "oppositeParty"])
    async def test_rejected_case_not_persisted(
        self, lifecycle, registered_user, session_factory, missing
    ):
        payload = make_case_payload(str(registered_user.id))
        del payload[missing]
        with pytest.raises(ValidationError):
            await lifecycle.register_case(payload)
        assert await count_rows(session_factory, Case) == 0
        assert await count_rows(session_factory, ScheduledTransition) == 0

    @pytest.mark.asyncio
    async def test_unknown_party(self, lifecycle, session_factory):
        with pytest.raises(NotFoundError):
            await lifecycle.register_case(make_case_payload(str(uuid.uuid4())))
        assert await count_rows(session_factory, Case) == 0

    @pytest.mark.asyncio
    async def test_get_case_with_malformed_id(self, lifecycle):
        with pytest.raises(NotFoundError):
            await lifecycle.get_case("not-a-uuid")

    @pytest.mark.asyncio
    async def test_list_cases_filters(self, lifecycle, registered_user):
        party_id = str(registered_user.id)
        await lifecycle.register_case(make_case_payload(party_id))
        await lifecycle.register_case(make_case_payload(party_id, caseType="Business"))

        assert len(await lifecycle.list_cases()) == 2
        business = await lifecycle.list_cases(case_type="Business")
        assert [c.case_type for c in business] == ["Business"]
        assert await lifecycle.list_cases(status=CaseStatus.RESOLVED.value) == []


# =============================================================================
# Workflow
# =============================================================================

class TestWorkflow:

    @pytest.mark.asyncio
    async def test_accepting_response(self, lifecycle, filed_case, events):
        async with events.subscribe(case_topic(str(filed_case.id))) as queue:
            case = await lifecycle.record_opposite_party_response(
                str(filed_case.id), {"accepted": True}
            )
            event = queue.get_nowait()

        assert case.status == CaseStatus.ACCEPTED.value
        assert case.opposite_party_has_accepted is True
        assert event["event"] == "caseStatusUpdate"
        assert event["caseId"] == str(filed_case.id)
        assert event["status"] == CaseStatus.ACCEPTED.value
        assert event["oppositePartyResponse"] is True

    @pytest.mark.asyncio
    async def test_rejecting_response(self, lifecycle, filed_case):
        case = await lifecycle.record_opposite_party_response(
            str(filed_case.id), {"accepted": False, "reason": "Not interested"}
        )
        assert case.status == CaseStatus.REJECTED.value
        assert case.opposite_party_has_accepted is False

    @pytest.mark.asyncio
    async def test_response_after_panel_is_applied(self, lifecycle, filed_case):
        case_id = str(filed_case.id)
        await lifecycle.form_panel(case_id, {"panel": VALID_PANEL})

        case = await lifecycle.record_opposite_party_response(case_id, {"accepted": False})
        assert case.status == CaseStatus.REJECTED.value
        assert case.opposite_party_has_accepted is False

        case = await lifecycle.record_opposite_party_response(case_id, {"accepted": True})
        assert case.status == CaseStatus.ACCEPTED.value
        assert case.opposite_party_has_accepted is True

    @pytest.mark.asyncio
    async def test_witnesses_append_in_order(self, lifecycle, filed_case):
        case_id = str(filed_case.id)
        await lifecycle.nominate_witnesses(case_id, {"witnesses": [{"name": "First"}]})
        case = await lifecycle.nominate_witnesses(
            case_id,
            {"witnesses": [{"name": "Second", "nominatedBy": "party"}, {"name": "Third"}]},
        )
        assert [w.name for w in case.witnesses] == ["First", "Second", "Third"]
        assert [w.position for w in case.witnesses] == [0, 1, 2]
        assert case.status == CaseStatus.QUEUED.value

    @pytest.mark.asyncio
    async def test_form_panel(self, lifecycle, filed_case, events):
        async with events.subscribe(DASHBOARD_TOPIC) as queue:
            case = await lifecycle.form_panel(str(filed_case.id), {"panel": VALID_PANEL})
            event = queue.get_nowait()

        assert case.status == CaseStatus.PANEL_CREATED.value
        assert [m.name for m in case.panel] == [m["name"] for m in VALID_PANEL]
        assert all(m.assigned_at is not None for m in case.panel)
        assert event["panelCreated"] is True

    @pytest.mark.asyncio
    async def test_form_panel_replaces_existing(self, lifecycle, filed_case):
        case_id = str(filed_case.id)
        await lifecycle.form_panel(case_id, {"panel": VALID_PANEL})
        replacement = [{"name": "Solo", "expertise": "Community lawyer and scholar"}]
        case = await lifecycle.form_panel(case_id, {"panel": replacement})
        assert [m.name for m in case.panel] == ["Solo"]

    @pytest.mark.asyncio
    async def test_invalid_panel_leaves_case_untouched(self, lifecycle, filed_case, session_factory):
        bad = [{"name": "A", "expertise": "Lawyer"}, {"name": "B", "expertise": "Doctor"}]
        with pytest.raises(ValidationError):
            await lifecycle.form_panel(str(filed_case.id), {"panel": bad})

        stored = await reload_case(session_factory, filed_case.id)
        assert stored.status == CaseStatus.QUEUED.value
        assert stored.panel == []

    @pytest.mark.asyncio
    async def test_panel_after_resolution_is_conflict(self, lifecycle, filed_case):
        await lifecycle.resolve(str(filed_case.id), {"agreement": "Settled"})
        with pytest.raises(ConflictError):
            await lifecycle.form_panel(str(filed_case.id), {"panel": VALID_PANEL})

    @pytest.mark.asyncio
    async def test_schedule_mediation_appends_sessions(self, lifecycle, filed_case):
        case_id = str(filed_case.id)
        await lifecycle.schedule_mediation(case_id, {"scheduledAt": "2026-11-02T10:00:00Z"})
        case = await lifecycle.schedule_mediation(
            case_id,
            {"scheduledAt": "2026-11-09T10:00:00Z", "attendees": ["Ayesha"], "notes": "Follow-up"},
        )
        assert case.status == CaseStatus.MEDIATION_IN_PROGRESS.value
        assert len(case.mediation_sessions) == 2
        assert case.mediation_sessions[1].notes == "Follow-up"
        assert case.mediation_sessions[1].attendees == ["Ayesha"]
        assert all(s.status == "scheduled" for s in case.mediation_sessions)

    @pytest.mark.asyncio
    async def test_resolve(self, lifecycle, filed_case):
        case = await lifecycle.resolve(
            str(filed_case.id), {"agreement": "Shared upkeep", "satisfactionLevel": 4}
        )
        assert case.status == CaseStatus.RESOLVED.value
        assert case.is_resolved is True
        assert case.agreement == "Shared upkeep"
        assert case.satisfaction_level == 4
        assert case.resolved_at is not None

    @pytest.mark.asyncio
    async def test_resolve_missing_case_mutates_nothing(self, lifecycle, filed_case, session_factory):
        with pytest.raises(NotFoundError):
            await lifecycle.resolve(str(uuid.uuid4()), {"agreement": "x"})

        stored = await reload_case(session_factory, filed_case.id)
        assert stored.is_resolved is False
        assert stored.status == CaseStatus.QUEUED.value

    @pytest.mark.asyncio
    async def test_override_accepts_any_status(self, lifecycle, filed_case, events):
        async with events.subscribe(DASHBOARD_TOPIC) as queue:
            case = await lifecycle.override_status(
                str(filed_case.id), {"status": CaseStatus.UNRESOLVED.value}
            )
            event = queue.get_nowait()
        assert case.status == CaseStatus.UNRESOLVED.value
        assert event["previousStatus"] == CaseStatus.QUEUED.value

        case = await lifecycle.override_status(
            str(filed_case.id), {"status": CaseStatus.QUEUED.value}
        )
        assert case.status == CaseStatus.QUEUED.value

    @pytest.mark.asyncio
    async def test_override_rejects_unknown_status(self, lifecycle, filed_case):
        with pytest.raises(ValidationError) as exc:
            await lifecycle.override_status(str(filed_case.id), {"status": "Archived"})
        assert exc.value.message == "Invalid status"


# =============================================================================
# Statistics
# =============================================================================

class TestDashboardStats:

    @pytest.mark.asyncio
    async def test_empty(self, lifecycle):
        stats = await lifecycle.dashboard_stats()
        assert stats["totalCases"] == 0
        assert set(stats["statusDistribution"].values()) == {0}
        assert stats["casesByType"] == {}

    @pytest.mark.asyncio
    async def test_counts(self, lifecycle, registered_user):
        party_id = str(registered_user.id)
        first, _ = await lifecycle.register_case(make_case_payload(party_id))
        second, _ = await lifecycle.register_case(make_case_payload(party_id, caseType="Criminal"))
        await lifecycle.register_case(make_case_payload(party_id))
        await lifecycle.record_opposite_party_response(str(first.id), {"accepted": True})
        await lifecycle.resolve(str(second.id), {"agreement": "Apology"})

        stats = await lifecycle.dashboard_stats()
        assert stats["totalCases"] == 3
        distribution = stats["statusDistribution"]
        assert distribution["queued"] == 1
        assert distribution["accepted"] == 1
        assert distribution["resolved"] == 1
        assert stats["casesByType"] == {"Family": 2, "Criminal": 1}
