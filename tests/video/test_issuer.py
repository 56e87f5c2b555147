"""Tests for CredentialIssuer."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from learnermax.config.settings import Settings
from learnermax.core.errors import ConfigurationError, ForbiddenError, NotFoundError
from learnermax.courses.models import Lesson
from learnermax.enrollment.gate import EnrollmentGate
from learnermax.enrollment.models import EnrollmentRecord
from learnermax.video.keys import SigningKeyProvider
from learnermax.video.service import CredentialIssuer, CredentialKind
from learnermax.video.signer import POLICY_COOKIE

from tests.fakes import FakeLessonService, InMemoryEnrollmentRepository
from tests.video import DOMAIN, KEY_PAIR_ID


@pytest.fixture
def lazy_keys() -> Mock:
    keys = Mock(spec=SigningKeyProvider)
    keys.get = AsyncMock()
    return keys


@pytest.fixture
def make_issuer(
    lesson_service: FakeLessonService, enrollment_repository: InMemoryEnrollmentRepository
):
    def _make(keys) -> CredentialIssuer:
        return CredentialIssuer(
            gate=EnrollmentGate(enrollment_repository),
            lessons=lesson_service,
            keys=keys,
            domain=DOMAIN,
            key_pair_id=KEY_PAIR_ID,
        )

    return _make


class TestIssueVideoUrl:
    """Tests for issue_video_url."""

    @pytest.mark.asyncio
    async def test_enrolled(
        self, make_issuer, key_provider: SigningKeyProvider, enrolled: EnrollmentRecord
    ) -> None:
        """Enrolled students get a signed URL for the lesson's object."""
        before = datetime.now(UTC)
        credential = await make_issuer(key_provider).issue_video_url("student-1", "lesson-2")

        assert credential.kind is CredentialKind.URL
        assert credential.resource == f"https://{DOMAIN}/courses/course-1/lesson-2.mp4"
        assert credential.url.startswith(credential.resource + "?")
        assert f"Key-Pair-Id={KEY_PAIR_ID}" in credential.url
        assert timedelta(minutes=29) < credential.expires_at - before <= timedelta(minutes=31)

    @pytest.mark.asyncio
    async def test_not_enrolled_never_fetches_key(self, make_issuer, lazy_keys: Mock) -> None:
        """A denied request does not touch Secrets Manager."""
        with pytest.raises(ForbiddenError):
            await make_issuer(lazy_keys).issue_video_url("student-1", "lesson-1")

        lazy_keys.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_lesson(self, make_issuer, lazy_keys: Mock) -> None:
        """Unknown lessons are NotFound."""
        with pytest.raises(NotFoundError):
            await make_issuer(lazy_keys).issue_video_url("student-1", "lesson-99")

        lazy_keys.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lesson_without_video(
        self,
        make_issuer,
        lazy_keys: Mock,
        lesson_service: FakeLessonService,
        enrolled: EnrollmentRecord,
    ) -> None:
        """A lesson whose video is not uploaded yet is NotFound, not a signed dead link."""
        lesson_service.lessons["lesson-4"] = Lesson("lesson-4", "course-1", "Draft", 4, None)

        with pytest.raises(NotFoundError, match="no video"):
            await make_issuer(lazy_keys).issue_video_url("student-1", "lesson-4")

        lazy_keys.get.assert_not_awaited()


class TestIssueCookies:
    """Tests for issue_cookies."""

    @pytest.mark.asyncio
    async def test_enrolled(
        self, make_issuer, key_provider: SigningKeyProvider, enrolled: EnrollmentRecord
    ) -> None:
        """Cookies cover the course prefix for a day."""
        before = datetime.now(UTC)
        credential = await make_issuer(key_provider).issue_cookies("student-1", "course-1")

        assert credential.kind is CredentialKind.COOKIES
        assert credential.resource == f"https://{DOMAIN}/courses/course-1/*"
        assert POLICY_COOKIE in credential.cookies
        assert timedelta(hours=23) < credential.expires_at - before <= timedelta(hours=25)

    @pytest.mark.asyncio
    async def test_not_enrolled_never_fetches_key(self, make_issuer, lazy_keys: Mock) -> None:
        """Cookies are gated the same way as URLs."""
        with pytest.raises(ForbiddenError):
            await make_issuer(lazy_keys).issue_cookies("student-1", "course-1")

        lazy_keys.get.assert_not_awaited()


class TestFromSettings:
    """Tests for CredentialIssuer.from_settings."""

    def test_missing_configuration(self, lesson_service: FakeLessonService) -> None:
        """Missing variables are named in the error."""
        settings = Settings(
            cloudfront_domain=DOMAIN,
            cloudfront_key_pair_id=None,
            cloudfront_private_key_secret_name=None,
        )

        with pytest.raises(ConfigurationError) as exc_info:
            CredentialIssuer.from_settings(settings, gate=Mock(), lessons=lesson_service)

        assert "CLOUDFRONT_KEY_PAIR_ID" in exc_info.value.message
        assert "CLOUDFRONT_PRIVATE_KEY_SECRET_NAME" in exc_info.value.message

    def test_configured(self, lesson_service: FakeLessonService, key_provider) -> None:
        """Expiries come from settings."""
        settings = Settings(
            cloudfront_domain=DOMAIN,
            cloudfront_key_pair_id=KEY_PAIR_ID,
            cloudfront_private_key_secret_name="learnermax/cloudfront-key",
            video_url_expiry_minutes=10,
        )

        issuer = CredentialIssuer.from_settings(
            settings, gate=Mock(), lessons=lesson_service, keys=key_provider
        )

        assert issuer.domain == DOMAIN
        assert issuer.url_expiry == timedelta(minutes=10)
        assert issuer.keys is key_provider
