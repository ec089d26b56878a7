"""Case filing and workflow routes"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, status

from resolveit.api.dependencies import Lifecycle, RequireAdmin
from resolveit.api.schemas import (
    CaseEnvelope,
    CaseFiledResponse,
    CaseResponse,
    case_to_response,
)

router = APIRouter()

JsonBody = Annotated[Any, Body()]


@router.post(
    "/register-case",
    response_model=CaseFiledResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_case(lifecycle: Lifecycle, raw: JsonBody = None):
    """File a new case. It starts Queued and moves to Awaiting Response shortly after."""
    case, notice = await lifecycle.register_case(raw)
    return CaseFiledResponse(
        message="Case registered successfully!",
        case=case_to_response(case),
        verification_status=notice.verification_status,
        notification=notice.notification,
    )


@router.get("/case/{case_id}", response_model=CaseResponse)
async def get_case(case_id: str, lifecycle: Lifecycle):
    """Get a single case with its party, panel, witnesses and sessions."""
    return case_to_response(await lifecycle.get_case(case_id))


@router.post("/case/{case_id}/opposite-party-response", response_model=CaseEnvelope)
async def opposite_party_response(
    case_id: str,
    lifecycle: Lifecycle,
    raw: JsonBody = None,
):
    """Opposite party accepts or rejects mediation."""
    case = await lifecycle.record_opposite_party_response(case_id, raw)
    verb = "accepted" if case.opposite_party_has_accepted else "rejected"
    return CaseEnvelope(
        message=f"Opposite party has {verb} mediation",
        case=case_to_response(case),
    )


@router.patch("/case/{case_id}/witnesses", response_model=CaseEnvelope)
async def nominate_witnesses(
    case_id: str,
    admin: RequireAdmin,
    lifecycle: Lifecycle,
    raw: JsonBody = None,
):
    case = await lifecycle.nominate_witnesses(case_id, raw)
    return CaseEnvelope(message="Witnesses nominated!", case=case_to_response(case))


@router.patch("/case/{case_id}/panel", response_model=CaseEnvelope)
async def create_panel(
    case_id: str,
    admin: RequireAdmin,
    lifecycle: Lifecycle,
    raw: JsonBody = None,
):
    """Form (or replace) the mediation panel."""
    case = await lifecycle.form_panel(case_id, raw)
    return CaseEnvelope(message="Panel created!", case=case_to_response(case))


@router.post("/case/{case_id}/schedule-mediation", response_model=CaseEnvelope)
async def schedule_mediation(
    case_id: str,
    admin: RequireAdmin,
    lifecycle: Lifecycle,
    raw: JsonBody = None,
):
    case = await lifecycle.schedule_mediation(case_id, raw)
    return CaseEnvelope(
        message="Mediation session scheduled successfully",
        case=case_to_response(case),
    )


@router.post("/case/{case_id}/resolve", response_model=CaseEnvelope)
async def resolve_case(
    case_id: str,
    admin: RequireAdmin,
    lifecycle: Lifecycle,
    raw: JsonBody = None,
):
    case = await lifecycle.resolve(case_id, raw)
    return CaseEnvelope(message="Case resolved successfully", case=case_to_response(case))


@router.patch("/case/{case_id}/workflow-status", response_model=CaseEnvelope)
@router.patch("/case/{case_id}/status", response_model=CaseEnvelope)
async def update_workflow_status(
    case_id: str,
    admin: RequireAdmin,
    lifecycle: Lifecycle,
    raw: JsonBody = None,
):
    """Administrator override: set any workflow status."""
    case = await lifecycle.override_status(case_id, raw)
    return CaseEnvelope(message="Case status updated!", case=case_to_response(case))
