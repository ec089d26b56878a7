"""Mediation panel composition rule.

A panel must cover three kinds of expertise: a lawyer, a religious
scholar and a community member. Matching is a case-insensitive
substring test on each member's free-text expertise.
"""

from typing import Any, Iterable

from resolveit.core.exceptions import ValidationError

PANEL_COMPOSITION_ERROR = (
    "Panel must include at least one lawyer, one religious scholar, "
    "and one community member"
)

# category -> any of these substrings satisfies it
REQUIRED_EXPERTISE: dict[str, tuple[str, ...]] = {
    "lawyer": ("lawyer",),
    "religious scholar": ("religious", "scholar"),
    "community member": ("community",),
}


def _expertise_of(member: Any) -> str:
    if isinstance(member, dict):
        value = member.get("expertise")
    else:
        value = getattr(member, "expertise", None)
    return value.lower() if isinstance(value, str) else ""


def missing_expertise(members: Iterable[Any]) -> list[str]:
    """Return the required categories the panel does not cover."""
    expertise = [_expertise_of(m) for m in members]
    return [
        category
        for category, keywords in REQUIRED_EXPERTISE.items()
        if not any(k in e for e in expertise for k in keywords)
    ]


def is_valid_panel(members: Iterable[Any]) -> bool:
    return not missing_expertise(members)


def enforce_panel_composition(members: Iterable[Any]) -> None:
    """Raise a single aggregate ValidationError if a category is missing."""
    missing = missing_expertise(members)
    if missing:
        raise ValidationError(
            PANEL_COMPOSITION_ERROR,
            details={"missing": missing},
        )
