"""Tests for CloudFront signing."""

import base64
from datetime import UTC, datetime
from urllib.parse import parse_qs, urlsplit

import orjson
import pytest
from botocore.signers import CloudFrontSigner
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from learnermax.video.signer import (
    KEY_PAIR_ID_COOKIE,
    POLICY_COOKIE,
    SIGNATURE_COOKIE,
    cloudfront_b64encode,
    sign_cookies,
    sign_url,
)


EXPIRES = datetime(2030, 1, 1, tzinfo=UTC)


def cloudfront_b64decode(value: str) -> bytes:
    return base64.b64decode(value.replace("-", "+").replace("_", "=").replace("~", "/"))


def verify(private_key: RSAPrivateKey, signature: bytes, message: bytes) -> None:
    private_key.public_key().verify(signature, message, padding.PKCS1v15(), hashes.SHA1())


class TestCloudFrontB64:
    """CloudFront's URL-safe base64 alphabet."""

    def test_replaces_unsafe_characters(self) -> None:
        """'+', '=' and '/' never appear."""
        encoded = cloudfront_b64encode(b"\xfb\xff\xbf\xfe")
        assert not set("+=/") & set(encoded)
        assert cloudfront_b64decode(encoded) == b"\xfb\xff\xbf\xfe"


class TestSignUrl:
    """Canned-policy signed URLs."""

    def test_query_parameters(self, private_key: RSAPrivateKey) -> None:
        """The URL carries expiry, signature and key pair id."""
        url = "https://cdn.example.com/courses/course-1/lesson-1.mp4"
        signed = sign_url(url, "K123", private_key, EXPIRES)

        parts = urlsplit(signed)
        query = parse_qs(parts.query)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == url
        assert query["Expires"] == [str(int(EXPIRES.timestamp()))]
        assert query["Key-Pair-Id"] == ["K123"]
        assert "Signature" in query

    def test_signature_verifies(self, private_key: RSAPrivateKey) -> None:
        """The signature covers the canned policy for that URL and expiry."""
        url = "https://cdn.example.com/courses/course-1/lesson-1.mp4"
        signed = sign_url(url, "K123", private_key, EXPIRES)
        signature = cloudfront_b64decode(parse_qs(urlsplit(signed).query)["Signature"][0])

        policy = CloudFrontSigner("K123", None).build_policy(url, EXPIRES).encode("utf-8")
        verify(private_key, signature, policy)

    def test_signature_is_bound_to_the_url(self, private_key: RSAPrivateKey) -> None:
        """A signature for one object does not verify for another."""
        signed = sign_url("https://cdn.example.com/a.mp4", "K123", private_key, EXPIRES)
        signature = cloudfront_b64decode(parse_qs(urlsplit(signed).query)["Signature"][0])

        other = CloudFrontSigner("K123", None).build_policy(
            "https://cdn.example.com/b.mp4", EXPIRES
        )
        with pytest.raises(InvalidSignature):
            verify(private_key, signature, other.encode("utf-8"))


class TestSignCookies:
    """Custom-policy signed cookies."""

    def test_cookie_names(self, private_key: RSAPrivateKey) -> None:
        """Exactly the three CloudFront cookies are produced."""
        cookies = sign_cookies("https://cdn.example.com/courses/c/*", "K123", private_key, EXPIRES)

        assert set(cookies) == {POLICY_COOKIE, SIGNATURE_COOKIE, KEY_PAIR_ID_COOKIE}
        assert cookies[KEY_PAIR_ID_COOKIE] == "K123"

    def test_policy_scopes_course_prefix(self, private_key: RSAPrivateKey) -> None:
        """The policy names the wildcard resource and the expiry."""
        resource = "https://cdn.example.com/courses/course-1/*"
        cookies = sign_cookies(resource, "K123", private_key, EXPIRES)

        statement = orjson.loads(cloudfront_b64decode(cookies[POLICY_COOKIE]))["Statement"][0]
        assert statement["Resource"] == resource
        assert statement["Condition"]["DateLessThan"]["AWS:EpochTime"] == int(
            EXPIRES.timestamp()
        )

    def test_signature_verifies_over_policy(self, private_key: RSAPrivateKey) -> None:
        """The signature is RSA-SHA1 over the decoded policy."""
        cookies = sign_cookies(
            "https://cdn.example.com/courses/course-1/*", "K123", private_key, EXPIRES
        )

        verify(
            private_key,
            cloudfront_b64decode(cookies[SIGNATURE_COOKIE]),
            cloudfront_b64decode(cookies[POLICY_COOKIE]),
        )
