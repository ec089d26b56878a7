"""Admin routes — case list and help-desk answers"""

from pydantic import BaseModel
from fastapi import APIRouter, Query

from resolveit.api.dependencies import DBSession, Lifecycle, RequireAdmin
from resolveit.api.schemas import CaseResponse, case_to_response
from resolveit.cases.repository import FaqRepository
from resolveit.core.exceptions import NotFoundError, ValidationError
from resolveit.core.logging import log

router = APIRouter()


# ─── Schemas ─────────────────────────────────────────

class AnswerRequest(BaseModel):
    query: str
    answer: str


class AnswerResponse(BaseModel):
    query: str
    answer: str


# ─── Cases (admin-only) ──────────────────────────────

@router.get("/cases", response_model=list[CaseResponse])
async def list_cases(
    admin: RequireAdmin,
    lifecycle: Lifecycle,
    status: str | None = None,
    case_type: str | None = Query(None, alias="caseType"),
):
    """All cases, optionally filtered by status and case type."""
    cases = await lifecycle.list_cases(status=status, case_type=case_type)
    return [case_to_response(c) for c in cases]


# ─── Help-desk answers ───────────────────────────────

@router.post("/admin-answer")
async def save_answer(request: AnswerRequest, admin: RequireAdmin, db: DBSession):
    """Store the administrator's answer to a help-chat question."""
    query = request.query.strip()
    if not query:
        raise ValidationError("Query is required.")

    await FaqRepository(db).upsert(query, request.answer.strip())
    log.info("Saved help-desk answer")
    return {"message": "Answer saved successfully!"}


@router.get("/answers", response_model=AnswerResponse)
async def get_answer(db: DBSession, query: str = Query(..., min_length=1)):
    """Look up the stored answer for a question."""
    faq = await FaqRepository(db).get(query.strip())
    if not faq:
        raise NotFoundError("Answer")
    return AnswerResponse(query=faq.query, answer=faq.answer)
