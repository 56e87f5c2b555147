"""Fixtures for video delivery tests."""

from unittest.mock import Mock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from fastapi import FastAPI

from learnermax.video.keys import SigningKeyProvider
from learnermax.video.service import CredentialIssuer

from tests.fakes import FakeLessonService
from tests.video import DOMAIN, KEY_PAIR_ID



@pytest.fixture(scope="session")
def private_key() -> RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(private_key: RSAPrivateKey) -> str:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def secrets_client(private_key_pem: str) -> Mock:
    client = Mock()
    client.get_secret_value.return_value = {"SecretString": private_key_pem}
    return client


@pytest.fixture
def key_provider(secrets_client: Mock) -> SigningKeyProvider:
    return SigningKeyProvider("learnermax/cloudfront-key", "us-east-1", client=secrets_client)


@pytest.fixture
def issuer(
    services: FastAPI,
    lesson_service: FakeLessonService,
    key_provider: SigningKeyProvider,
) -> CredentialIssuer:
    """A real issuer wired onto the app, backed by a mocked Secrets Manager."""
    issuer = CredentialIssuer(
        gate=services.state.enrollment_service.gate,
        lessons=lesson_service,
        keys=key_provider,
        domain=DOMAIN,
        key_pair_id=KEY_PAIR_ID,
    )
    services.state.credential_issuer = issuer
    return issuer
