from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger("audit")


@dataclass
class AuditEvent:
    """Structured representation of an audit event.

    Keeps the payload to ids, types and counts; never participant audio or
    free text beyond what the host already sees in the queue.
    """

    timestamp: str
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


class AuditService:
    def log_event(
        self,
        *,
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        """Log a structured audit event.

        - `action`: high-level verb, e.g. "create_session", "delete_question".
        - `resource_type`: coarse type, e.g. "session", "question", "audio".
        - `resource_id`: session token or stringified question id.
        - `extra`: optional small dict of metadata (counts, flags).
        """

        event = AuditEvent(
            timestamp=datetime.now(timezone.utc).isoformat(),
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            extra=extra,
        )

        try:
            logger.info(json.dumps(asdict(event)))
        except TypeError:
            # Something in extra is not JSON serializable; log without it.
            safe_event = asdict(event)
            safe_event["extra"] = None
            logger.info(json.dumps(safe_event))

        return event


audit_service = AuditService()
