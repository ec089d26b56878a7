"""Case status-change notifications."""

from typing import Any
import uuid

from resolveit.core.logging import log
from resolveit.events.broadcaster import DASHBOARD_TOPIC, EventBroadcaster, case_topic

STATUS_EVENT = "caseStatusUpdate"


async def publish_status_change(
    broadcaster: EventBroadcaster,
    case_id: uuid.UUID | str,
    status: str,
    **metadata: Any,
) -> dict[str, Any]:
    """Tell dashboard listeners and watchers of this case about a new status."""
    payload = {
        "event": STATUS_EVENT,
        "caseId": str(case_id),
        "status": status,
        **{k: v for k, v in metadata.items() if v is not None},
    }
    for topic in (DASHBOARD_TOPIC, case_topic(str(case_id))):
        try:
            await broadcaster.publish(topic, payload)
        except Exception as e:
            log.error(f"Failed to publish {STATUS_EVENT} on {topic}: {e}")
    return payload
