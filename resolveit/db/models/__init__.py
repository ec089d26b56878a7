"""Database models"""

from resolveit.db.models.user import User, Gender
from resolveit.db.models.case import Case, CaseStatus, CaseType
from resolveit.db.models.witness import Witness, NominatedBy
from resolveit.db.models.panel_member import PanelMember
from resolveit.db.models.mediation_session import MediationSession, SessionStatus
from resolveit.db.models.scheduled_transition import ScheduledTransition, TransitionState
from resolveit.db.models.faq_answer import FaqAnswer

__all__ = [
    "User",
    "Gender",
    "Case",
    "CaseStatus",
    "CaseType",
    "Witness",
    "NominatedBy",
    "PanelMember",
    "MediationSession",
    "SessionStatus",
    "ScheduledTransition",
    "TransitionState",
    "FaqAnswer",
]
