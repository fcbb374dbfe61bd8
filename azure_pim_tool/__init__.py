"""
Azure PIM Tool

A small CLI to list Azure subscriptions and eligible roles, and to self-activate
a Privileged Identity Management role assignment for a limited time.
"""

__version__ = "0.1.0"

from .azure_client import PimSession
from .credentials import AmbientCredentialProvider, CredentialProvider, StaticCredentialProvider
from .models import ActivationRequest
from .exceptions import (
    PimError,
    CredentialError,
    NetworkError,
    AuthError,
    DataIntegrityError,
    SubscriptionNotFound,
    RoleNotFound,
    ProviderRejected,
    InvalidDurationError,
    MissingPrincipalError,
)

__all__ = [
    "PimSession",
    "AmbientCredentialProvider",
    "CredentialProvider",
    "StaticCredentialProvider",
    "ActivationRequest",
    "PimError",
    "CredentialError",
    "NetworkError",
    "AuthError",
    "DataIntegrityError",
    "SubscriptionNotFound",
    "RoleNotFound",
    "ProviderRejected",
    "InvalidDurationError",
    "MissingPrincipalError",
]
