"""
Azure SDK integration for listing and activating eligible role assignments.
"""

import json
import logging
import time
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

from azure.core.exceptions import AzureError, ClientAuthenticationError, HttpResponseError
from azure.core.pipeline.policies import SansIOHTTPPolicy
from azure.mgmt.authorization import AuthorizationManagementClient
from azure.mgmt.authorization.models import (
    RoleAssignmentScheduleRequest,
    RoleAssignmentScheduleRequestPropertiesScheduleInfo,
    RoleAssignmentScheduleRequestPropertiesScheduleInfoExpiration,
)
from azure.mgmt.subscription import SubscriptionClient

from .config import DEFAULT_TIMEOUT
from .credentials import AmbientCredentialProvider, CredentialProvider
from .durations import whole_minutes
from .exceptions import (
    AuthError,
    DataIntegrityError,
    InvalidDurationError,
    MissingPrincipalError,
    NetworkError,
    ProviderRejected,
    RoleNotFound,
    SubscriptionNotFound,
)
from .models import EXPIRATION_AFTER_DURATION, ActivationRequest

logger = logging.getLogger(__name__)

SUBSCRIPTION_STATE_ENABLED = "Enabled"


def subscription_scope(subscription_id: str) -> str:
    """ARM scope for a subscription, always with a leading slash."""
    return f"/subscriptions/{subscription_id}"


def normalize_scope(scope: str) -> str:
    """Add the leading slash ARM scopes are expected to carry."""
    return "/" + scope.lstrip("/")


def _role_display_name(schedule) -> Optional[str]:
    expanded = getattr(schedule, "expanded_properties", None)
    role_definition = getattr(expanded, "role_definition", None)
    return getattr(role_definition, "display_name", None)


def _translate_read_error(error: AzureError, action: str, partial: Dict) -> NetworkError:
    if isinstance(error, ClientAuthenticationError):
        return AuthError(f"Failed to {action}: {error}", partial=partial)
    return NetworkError(f"Failed to {action}: {error}", partial=partial)


class _DeadlineExceeded(Exception):
    """Raised inside the pipeline once a timeout window is used up."""


class _Deadline:
    """One timeout window shared by every request of a listing or call."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return self.expires_at - time.monotonic()

    def client_kwargs(self) -> Dict[str, Any]:
        """Client options that bound each page request and its retries."""
        return {
            "per_call_policies": [_DeadlinePolicy(self, retry_budget=True)],
            "per_retry_policies": [_DeadlinePolicy(self)],
        }

    def exceeded(self, action: str, partial: Optional[Dict] = None) -> NetworkError:
        return NetworkError(
            f"Failed to {action}: timed out after {self.seconds:g}s", partial=partial
        )


class _DeadlinePolicy(SansIOHTTPPolicy):
    """
    Caps a request's connect and read timeouts at what is left of a deadline.

    Placed before the retry policy (``retry_budget=True``) it also sets the
    retry policy's overall ``timeout`` for the request. After the retry policy
    it runs on every attempt. ``timeout`` is consumed by the retry policy, so
    only the per-call instance may set it.
    """

    def __init__(self, deadline: _Deadline, retry_budget: bool = False):
        super().__init__()
        self.deadline = deadline
        self.retry_budget = retry_budget

    def on_request(self, request):
        remaining = self.deadline.remaining()
        if remaining <= 0:
            raise _DeadlineExceeded()
        options = request.context.options
        if self.retry_budget:
            options["timeout"] = remaining
        options["connection_timeout"] = remaining
        options["read_timeout"] = remaining


class PimSession:
    """
    Session for Azure Privileged Identity Management self-activation.

    Holds the credential, the acting principal's object id and the per-call
    timeout. Attributes are read-only once constructed.
    """

    def __init__(
        self,
        principal_id: Optional[str],
        credential_provider: Optional[CredentialProvider] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the session.

        Args:
            principal_id: Object id of the acting user (see ``whoami``)
            credential_provider: Source of the Azure credential
                (default: environment, Azure CLI, managed identity)
            timeout: Seconds allowed for each call or paged listing

        Raises:
            CredentialError: If no usable ambient identity exists
        """
        provider = credential_provider or AmbientCredentialProvider()
        self._credential = provider.obtain()
        self._principal_id = principal_id
        self._timeout = timeout

    @property
    def principal_id(self) -> Optional[str]:
        return self._principal_id

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def credential(self):
        return self._credential

    def _drain_by_name(
        self,
        paged,
        name_of: Callable[[Any, Dict], Optional[str]],
        value_of: Callable[[Any], Any],
        kind: str,
        action: str,
        deadline: _Deadline,
    ) -> Dict[str, Any]:
        """
        Collect every page into a mapping keyed by display name.

        The first entry for a name wins; later duplicates are logged and
        dropped. ``name_of`` raises DataIntegrityError for malformed entries.
        """
        result: Dict[str, Any] = {}
        pages = iter(paged.by_page())

        while True:
            try:
                page = next(pages)
            except StopIteration:
                break
            except _DeadlineExceeded:
                raise deadline.exceeded(action, result) from None
            except AzureError as e:
                raise _translate_read_error(e, action, result) from e

            for item in page:
                name = name_of(item, result)
                if name is None:
                    continue
                if name in result:
                    logger.warning("Duplicate %s ignored: %s", kind, name)
                    continue
                result[name] = value_of(item)

        return result

    def subscriptions(self) -> Dict[str, str]:
        """
        List enabled subscriptions.

        Returns:
            Mapping of subscription display name to subscription id

        Raises:
            DataIntegrityError: If an entry lacks name, id or state
            NetworkError: On transport or HTTP failure (AuthError if refused)
        """

        def name_of(sub, partial):
            if (
                sub is None
                or sub.display_name is None
                or sub.subscription_id is None
                or sub.state is None
            ):
                raise DataIntegrityError(
                    "Unexpected empty subscription field returned", partial=partial
                )
            if sub.state != SUBSCRIPTION_STATE_ENABLED:
                # disabled, deleted, warned, past due...
                return None
            return sub.display_name

        deadline = _Deadline(self._timeout)
        client = SubscriptionClient(self._credential, **deadline.client_kwargs())
        try:
            paged = client.subscriptions.list()
        except AzureError as e:
            raise _translate_read_error(e, "list subscriptions", {}) from e

        return self._drain_by_name(
            paged,
            name_of,
            lambda sub: sub.subscription_id,
            kind="subscription",
            action="list subscriptions",
            deadline=deadline,
        )

    def role_eligibility_schedules(self, scope: str) -> Dict[str, Any]:
        """
        List role eligibility schedules visible at a scope.

        Args:
            scope: ARM scope, e.g. ``/subscriptions/<id>`` (leading slash optional)

        Returns:
            Mapping of role display name to the eligibility schedule record

        Raises:
            DataIntegrityError: If a schedule has no role definition display name
            NetworkError: On transport or HTTP failure (AuthError if refused)
        """
        scope = normalize_scope(scope)

        def name_of(schedule, partial):
            name = _role_display_name(schedule)
            if name is None:
                raise DataIntegrityError(
                    f"Unexpected empty role eligibility field returned at {scope}",
                    partial=partial,
                )
            return name

        deadline = _Deadline(self._timeout)
        client = AuthorizationManagementClient(
            self._credential, _subscription_of(scope), **deadline.client_kwargs()
        )
        action = f"list role eligibility schedules for {scope}"
        try:
            paged = client.role_eligibility_schedules.list_for_scope(scope)
        except AzureError as e:
            raise _translate_read_error(e, action, {}) from e

        return self._drain_by_name(
            paged,
            name_of,
            lambda schedule: schedule,
            kind="eligibility for role",
            action=action,
            deadline=deadline,
        )

    def _resolve_subscription(self, subscription_name: str) -> str:
        subs = self.subscriptions()
        subscription_id = subs.get(subscription_name)
        if subscription_id is None:
            raise SubscriptionNotFound(subscription_name)
        return subscription_id

    def roles_for_subscription(self, subscription_name: str) -> List[str]:
        """
        List role names with an eligibility schedule in a subscription.

        Args:
            subscription_name: Subscription display name

        Returns:
            Role display names, in no particular order

        Raises:
            SubscriptionNotFound: If the name does not match an enabled subscription
        """
        subscription_id = self._resolve_subscription(subscription_name)
        schedules = self.role_eligibility_schedules(subscription_scope(subscription_id))
        return list(schedules)

    def build_activation_request(
        self, schedule, justification: str, duration: timedelta
    ) -> ActivationRequest:
        """
        Build a self-activation request linked to an eligibility schedule.

        Raises:
            DataIntegrityError: If the schedule lacks its id or role definition id
        """
        if (
            schedule is None
            or getattr(schedule, "id", None) is None
            or getattr(schedule, "role_definition_id", None) is None
            or _role_display_name(schedule) is None
        ):
            raise DataIntegrityError("Unexpected empty role eligibility field returned")

        return ActivationRequest(
            principal_id=self._principal_id,
            role_definition_id=schedule.role_definition_id,
            linked_role_eligibility_schedule_id=schedule.id,
            justification=justification,
            duration=duration,
        )

    @staticmethod
    def _to_schedule_request(request: ActivationRequest) -> RoleAssignmentScheduleRequest:
        """Convert an ActivationRequest to the SDK request model."""
        return RoleAssignmentScheduleRequest(
            principal_id=request.principal_id,
            request_type=request.request_type,
            role_definition_id=request.role_definition_id,
            justification=request.justification,
            schedule_info=RoleAssignmentScheduleRequestPropertiesScheduleInfo(
                start_date_time=request.start_date_time,
                expiration=RoleAssignmentScheduleRequestPropertiesScheduleInfoExpiration(
                    type=EXPIRATION_AFTER_DURATION,
                    duration=request.expiration_duration,
                ),
            ),
            linked_role_eligibility_schedule_id=request.linked_role_eligibility_schedule_id,
        )

    def activate_role(
        self,
        subscription_name: str,
        role_display_name: str,
        justification: str,
        duration: timedelta,
    ):
        """
        Self-activate an eligible role on a subscription.

        Args:
            subscription_name: Subscription display name
            role_display_name: Role display name (as listed by ``roles``)
            justification: Audit reason recorded with the request
            duration: How long the assignment stays active, starting now

        Returns:
            The created role assignment schedule request

        Raises:
            InvalidDurationError: If duration is shorter than one minute
            MissingPrincipalError: If the session has no principal id
            SubscriptionNotFound: If the subscription does not resolve
            RoleNotFound: If the role has no eligibility schedule
            DataIntegrityError: If the schedule is missing required fields
            ProviderRejected: If Azure refuses the request
            NetworkError: On transport failure (AuthError if refused)
        """
        if whole_minutes(duration) < 1:
            raise InvalidDurationError(
                f"Activation duration must be at least one minute, got {duration}"
            )
        if not self._principal_id:
            raise MissingPrincipalError(
                "Principal id is required to activate a role (see 'whoami')"
            )

        subscription_id = self._resolve_subscription(subscription_name)
        scope = subscription_scope(subscription_id)

        schedules = self.role_eligibility_schedules(scope)
        schedule = schedules.get(role_display_name)
        if schedule is None:
            raise RoleNotFound(role_display_name, subscription_name)

        request = self.build_activation_request(schedule, justification, duration)
        logger.debug("Activation request %s at %s:\n%s", request.name, scope, request.to_json())

        deadline = _Deadline(self._timeout)
        client = AuthorizationManagementClient(
            self._credential, subscription_id, **deadline.client_kwargs()
        )
        try:
            response = client.role_assignment_schedule_requests.create(
                scope=scope,
                role_assignment_schedule_request_name=request.name,
                parameters=self._to_schedule_request(request),
            )
        except _DeadlineExceeded:
            raise deadline.exceeded("activate role") from None
        except ClientAuthenticationError as e:
            raise AuthError(f"Failed to activate role: {e}") from e
        except HttpResponseError as e:
            raise ProviderRejected(
                f"Failed to activate role: {e.message or e}", status_code=e.status_code
            ) from e
        except AzureError as e:
            raise NetworkError(f"Failed to activate role: {e}") from e

        _log_response(response)
        return response


def _subscription_of(scope: str) -> str:
    """Subscription id embedded in a subscription (or narrower) scope."""
    parts = [p for p in scope.split("/") if p]
    if len(parts) >= 2 and parts[0].lower() == "subscriptions":
        return parts[1]
    return ""


def _log_response(response) -> None:
    as_dict = getattr(response, "as_dict", None)
    body = as_dict() if callable(as_dict) else response
    logger.debug("%s", json.dumps(body, indent=2, default=str))
