"""
Request models for role activation.
"""

import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict

from pydantic import BaseModel, Field

from .durations import iso8601_minutes

REQUEST_TYPE_SELF_ACTIVATE = "SelfActivate"
EXPIRATION_AFTER_DURATION = "AfterDuration"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _request_name() -> str:
    return str(uuid.uuid4())


class ActivationRequest(BaseModel):
    """Self-activation of an eligible role assignment."""

    principal_id: str
    role_definition_id: str
    linked_role_eligibility_schedule_id: str
    justification: str
    duration: timedelta
    request_type: str = REQUEST_TYPE_SELF_ACTIVATE
    start_date_time: datetime = Field(default_factory=_utcnow)
    # Idempotency/correlation key for the create call
    name: str = Field(default_factory=_request_name)

    @property
    def expiration_duration(self) -> str:
        """Expiration as a whole-minute ISO-8601 duration (fractions truncated)."""
        return iso8601_minutes(self.duration)

    def to_dict(self) -> Dict:
        """Convert to the request body layout used by the ARM API."""
        return {
            "name": self.name,
            "properties": {
                "principalId": self.principal_id,
                "requestType": self.request_type,
                "roleDefinitionId": self.role_definition_id,
                "justification": self.justification,
                "scheduleInfo": {
                    "startDateTime": self.start_date_time.isoformat(),
                    "expiration": {
                        "type": EXPIRATION_AFTER_DURATION,
                        "duration": self.expiration_duration,
                    },
                },
                "linkedRoleEligibilityScheduleId": self.linked_role_eligibility_schedule_id,
            },
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
