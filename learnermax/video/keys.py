"""Process-wide handle on the CloudFront signing key.

The PEM key lives in AWS Secrets Manager. It is fetched on first use and kept
for the life of the process; rotating it requires a restart. Two requests
racing on a cold handle may both fetch, which is harmless.
"""

import asyncio
from typing import Any

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from learnermax.core.errors import ConfigurationError, UpstreamError


logger = structlog.get_logger(__name__)


class SigningKeyProvider:
    """Memoized async accessor for the RSA signing key."""

    def __init__(self, secret_name: str, region: str, client: Any = None):
        self.secret_name = secret_name
        self.region = region
        self._client = client
        self._key: RSAPrivateKey | None = None

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("secretsmanager", region_name=self.region)
        return self._client

    @property
    def is_loaded(self) -> bool:
        return self._key is not None

    async def get(self) -> RSAPrivateKey:
        """Return the signing key, fetching it on first use.

        Raises:
            ConfigurationError: The secret holds no usable RSA key
            UpstreamError: Secrets Manager could not be reached
        """
        if self._key is not None:
            return self._key

        try:
            response = await asyncio.to_thread(
                self.client.get_secret_value, SecretId=self.secret_name
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(
                "signing_key_fetch_failed",
                secret_name=self.secret_name,
                error_type=type(e).__name__,
            )
            raise UpstreamError("Could not load the video signing key") from e

        pem = response.get("SecretString")
        if not pem:
            logger.error("signing_key_missing", secret_name=self.secret_name)
            raise ConfigurationError("Video signing key secret is empty")

        self._key = load_rsa_private_key(pem)
        logger.info("signing_key_loaded", secret_name=self.secret_name)
        return self._key


def load_rsa_private_key(pem: str) -> RSAPrivateKey:
    """Parse an unencrypted PEM RSA private key.

    Raises:
        ConfigurationError: The PEM is malformed or not an RSA key
    """
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError) as e:
        logger.error("signing_key_invalid")
        raise ConfigurationError("Video signing key is not a valid PEM key") from e

    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationError("Video signing key must be an RSA key")
    return key
