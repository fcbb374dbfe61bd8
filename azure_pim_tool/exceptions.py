"""
Error types raised by the PIM session.

Listing operations attach the mapping built before the failure as ``partial``
so callers can inspect what was collected.
"""

from typing import Any, Dict, Optional


class PimError(Exception):
    """Base class for all errors raised by azure-pim-tool."""


class CredentialError(PimError):
    """No usable ambient Azure identity was found."""


class NetworkError(PimError):
    """Transport failure, timeout or unexpected HTTP error on a read call."""

    def __init__(self, message: str, partial: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.partial = partial if partial is not None else {}


class AuthError(NetworkError):
    """The provider refused the credential for this call."""


class DataIntegrityError(PimError):
    """A field the provider is expected to populate was missing."""

    def __init__(self, message: str, partial: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.partial = partial if partial is not None else {}


class SubscriptionNotFound(PimError):
    """The subscription display name did not resolve to an enabled subscription."""

    def __init__(self, name: str):
        super().__init__(f"Subscription not found: {name}")
        self.name = name


class RoleNotFound(PimError):
    """No role eligibility schedule exists for the role display name."""

    def __init__(self, name: str, subscription: str):
        super().__init__(
            f"Role eligibility schedule not found: {name} (subscription {subscription})"
        )
        self.name = name
        self.subscription = subscription


class ProviderRejected(PimError):
    """The activation request was refused by Azure (policy, expiry, conflict...)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidDurationError(PimError, ValueError):
    """A duration could not be parsed or is too short to activate."""


class MissingPrincipalError(PimError):
    """An activation was requested without the acting principal's object id."""
