"""CloudFront signed URLs and signed cookies.

Signing is RSA-SHA1 over the policy document, which is what CloudFront
verifies. URLs use a canned policy (one object, expiry only). Cookies use a
custom policy with a wildcard resource so one cookie set unlocks every HLS
segment under a course prefix.
"""

import base64
from collections.abc import Callable
from datetime import datetime

from botocore.signers import CloudFrontSigner
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey


POLICY_COOKIE = "CloudFront-Policy"
SIGNATURE_COOKIE = "CloudFront-Signature"
KEY_PAIR_ID_COOKIE = "CloudFront-Key-Pair-Id"


def rsa_signer(private_key: RSAPrivateKey) -> Callable[[bytes], bytes]:
    def sign(message: bytes) -> bytes:
        return private_key.sign(message, padding.PKCS1v15(), hashes.SHA1())  # noqa: S303

    return sign


def cloudfront_b64encode(data: bytes) -> str:
    """Base64 with CloudFront's URL-safe alphabet ('+' '=' '/' -> '-' '_' '~')."""
    return (
        base64.b64encode(data)
        .replace(b"+", b"-")
        .replace(b"=", b"_")
        .replace(b"/", b"~")
        .decode("ascii")
    )


def sign_url(
    url: str,
    key_pair_id: str,
    private_key: RSAPrivateKey,
    expires_at: datetime,
) -> str:
    """Sign a single object URL with a canned policy."""
    signer = CloudFrontSigner(key_pair_id, rsa_signer(private_key))
    return signer.generate_presigned_url(url, date_less_than=expires_at)


def sign_cookies(
    resource: str,
    key_pair_id: str,
    private_key: RSAPrivateKey,
    expires_at: datetime,
) -> dict[str, str]:
    """Build the three CloudFront cookies for a custom policy on ``resource``."""
    signer = CloudFrontSigner(key_pair_id, rsa_signer(private_key))
    policy = signer.build_policy(resource, expires_at).encode("utf-8")
    signature = signer.rsa_signer(policy)

    return {
        POLICY_COOKIE: cloudfront_b64encode(policy),
        SIGNATURE_COOKIE: cloudfront_b64encode(signature),
        KEY_PAIR_ID_COOKIE: key_pair_id,
    }
