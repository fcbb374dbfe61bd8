"""Tests for ambient credential discovery."""

from types import SimpleNamespace

import jwt
import pytest
from azure.identity import CredentialUnavailableError

from azure_pim_tool import azure_client
from azure_pim_tool.credentials import (
    MANAGEMENT_SCOPE,
    AmbientCredentialProvider,
    StaticCredentialProvider,
    signed_in_principal_id,
)
from azure_pim_tool.exceptions import CredentialError

SECRET = "test-signing-key-that-is-long-enough-for-hs256"


class DummyCredential:
    def __init__(self, claims=None, error=None):
        self.claims = claims or {}
        self.error = error
        self.scopes = []

    def get_token(self, *scopes, **kwargs):
        self.scopes.extend(scopes)
        if self.error:
            raise self.error
        return SimpleNamespace(token=jwt.encode(self.claims, SECRET, algorithm="HS256"))


def test_ambient_provider_requests_management_scope(monkeypatch):
    credential = DummyCredential()
    monkeypatch.setattr(AmbientCredentialProvider, "build_chain", staticmethod(lambda: credential))

    assert AmbientCredentialProvider().obtain() is credential
    assert credential.scopes == [MANAGEMENT_SCOPE]


def test_ambient_provider_without_identity(monkeypatch):
    credential = DummyCredential(error=CredentialUnavailableError("no identity"))
    monkeypatch.setattr(AmbientCredentialProvider, "build_chain", staticmethod(lambda: credential))

    with pytest.raises(CredentialError, match="no identity"):
        AmbientCredentialProvider().obtain()


def test_ambient_provider_skip_verify(monkeypatch):
    credential = DummyCredential(error=CredentialUnavailableError("no identity"))
    monkeypatch.setattr(AmbientCredentialProvider, "build_chain", staticmethod(lambda: credential))

    assert AmbientCredentialProvider(verify=False).obtain() is credential
    assert credential.scopes == []


def test_session_construction_fails_without_identity(monkeypatch):
    credential = DummyCredential(error=CredentialUnavailableError("no identity"))
    monkeypatch.setattr(AmbientCredentialProvider, "build_chain", staticmethod(lambda: credential))

    with pytest.raises(CredentialError):
        azure_client.PimSession("principal-1")


def test_signed_in_principal_id():
    provider = StaticCredentialProvider(DummyCredential({"oid": "oid-123", "upn": "me@example.com"}))

    assert signed_in_principal_id(provider) == "oid-123"


def test_signed_in_principal_id_missing_claim():
    provider = StaticCredentialProvider(DummyCredential({"appid": "app"}))

    with pytest.raises(CredentialError, match="oid"):
        signed_in_principal_id(provider)


def test_signed_in_principal_id_bad_token():
    credential = DummyCredential()
    credential.get_token = lambda *scopes, **kwargs: SimpleNamespace(token="not-a-jwt")

    with pytest.raises(CredentialError, match="Invalid access token"):
        signed_in_principal_id(StaticCredentialProvider(credential))


def test_signed_in_principal_id_without_identity():
    provider = StaticCredentialProvider(
        DummyCredential(error=CredentialUnavailableError("az login required"))
    )

    with pytest.raises(CredentialError, match="az login required"):
        signed_in_principal_id(provider)
