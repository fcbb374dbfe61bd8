"""
Ambient Azure credential discovery.
"""

import logging
from typing import Optional, Protocol

import jwt
from azure.core.credentials import TokenCredential
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import (
    AzureCliCredential,
    ChainedTokenCredential,
    CredentialUnavailableError,
    EnvironmentCredential,
    ManagedIdentityCredential,
)

from .exceptions import CredentialError

logger = logging.getLogger(__name__)

MANAGEMENT_SCOPE = "https://management.azure.com/.default"


class CredentialProvider(Protocol):
    """Anything that can hand out a token credential for Azure Resource Manager."""

    def obtain(self) -> TokenCredential:
        ...


class AmbientCredentialProvider:
    """
    Prioritized chain over environment variables, the Azure CLI login cache
    and managed identity.

    The chain is asked for a management token so a missing identity fails
    at session construction rather than on the first API call.
    """

    def __init__(self, verify: bool = True):
        self.verify = verify

    @staticmethod
    def build_chain() -> TokenCredential:
        return ChainedTokenCredential(
            EnvironmentCredential(),
            AzureCliCredential(),
            ManagedIdentityCredential(),
        )

    def obtain(self) -> TokenCredential:
        credential = self.build_chain()
        if self.verify:
            try:
                credential.get_token(MANAGEMENT_SCOPE)
            except (CredentialUnavailableError, ClientAuthenticationError) as e:
                raise CredentialError(f"No usable Azure identity: {e}") from e
        return credential


class StaticCredentialProvider:
    """Wraps an existing credential object."""

    def __init__(self, credential: TokenCredential):
        self.credential = credential

    def obtain(self) -> TokenCredential:
        return self.credential


def signed_in_principal_id(provider: Optional[CredentialProvider] = None) -> str:
    """
    Object id (``oid`` claim) of the identity behind the ambient credential.

    Raises:
        CredentialError: If no token can be obtained or it carries no ``oid``
    """
    credential = (provider or AmbientCredentialProvider(verify=False)).obtain()
    try:
        token = credential.get_token(MANAGEMENT_SCOPE).token
    except (CredentialUnavailableError, ClientAuthenticationError) as e:
        raise CredentialError(f"No usable Azure identity: {e}") from e

    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise CredentialError(f"Invalid access token: {e}") from e

    oid = claims.get("oid")
    if not oid:
        raise CredentialError("Access token has no 'oid' claim")
    logger.debug("Resolved principal id %s for %s", oid, claims.get("upn") or claims.get("appid"))
    return oid
