"""Playback credential issuance.

A credential is only minted after the enrollment gate approves. The signing
key is never fetched for a student who is not enrolled.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum

import structlog

from learnermax.config.settings import Settings
from learnermax.core.errors import ConfigurationError, NotFoundError
from learnermax.courses.service import LessonService
from learnermax.enrollment.gate import EnrollmentGate

from .keys import SigningKeyProvider
from .signer import sign_cookies, sign_url


logger = structlog.get_logger(__name__)


class CredentialKind(StrEnum):
    URL = "url"
    COOKIES = "cookies"


@dataclass
class PlaybackCredential:
    """A short-lived, path-scoped playback credential. Never persisted."""

    kind: CredentialKind
    resource: str
    expires_at: datetime
    url: str | None = None
    cookies: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def expires_at_epoch(self) -> int:
        return int(self.expires_at.timestamp())


class CredentialIssuer:
    """Mints CloudFront credentials for enrolled students."""

    def __init__(
        self,
        gate: EnrollmentGate,
        lessons: LessonService,
        keys: SigningKeyProvider,
        domain: str,
        key_pair_id: str,
        url_expiry: timedelta = timedelta(minutes=30),
        cookie_expiry: timedelta = timedelta(seconds=86400),
    ):
        self.gate = gate
        self.lessons = lessons
        self.keys = keys
        self.domain = domain
        self.key_pair_id = key_pair_id
        self.url_expiry = url_expiry
        self.cookie_expiry = cookie_expiry

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        gate: EnrollmentGate,
        lessons: LessonService,
        keys: SigningKeyProvider | None = None,
    ) -> "CredentialIssuer":
        """Build the issuer from settings.

        Raises:
            ConfigurationError: When any CloudFront variable is missing
        """
        missing = settings.missing_video_settings
        if missing:
            raise ConfigurationError(
                f"Video delivery is not configured; missing: {', '.join(missing)}"
            )

        return cls(
            gate=gate,
            lessons=lessons,
            keys=keys
            or SigningKeyProvider(
                settings.cloudfront_private_key_secret_name, settings.aws_region
            ),
            domain=settings.cloudfront_domain,
            key_pair_id=settings.cloudfront_key_pair_id,
            url_expiry=timedelta(minutes=settings.video_url_expiry_minutes),
            cookie_expiry=timedelta(seconds=settings.video_cookie_expiry_seconds),
        )

    def course_resource(self, course_id: str) -> str:
        return f"https://{self.domain}/courses/{course_id}/*"

    async def issue_video_url(self, student_id: str, lesson_id: str) -> PlaybackCredential:
        """Signed URL for one lesson's video.

        Raises:
            NotFoundError: Unknown lesson, or one without an uploaded video
            ForbiddenError: Student not enrolled in the lesson's course
        """
        lesson = await self.lessons.get_lesson(lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")

        await self.gate.require(student_id, lesson.course_id)
        if not lesson.video_key:
            logger.warning("lesson_video_missing", lesson_id=lesson_id)
            raise NotFoundError("Lesson has no video")

        private_key = await self.keys.get()
        expires_at = datetime.now(UTC) + self.url_expiry
        resource = f"https://{self.domain}/{lesson.video_key}"

        credential = PlaybackCredential(
            kind=CredentialKind.URL,
            resource=resource,
            expires_at=expires_at,
            url=sign_url(resource, self.key_pair_id, private_key, expires_at),
        )

        logger.info(
            "video_url_issued",
            student_id=student_id,
            course_id=lesson.course_id,
            lesson_id=lesson_id,
            expires_at=credential.expires_at_epoch,
        )
        return credential

    async def issue_cookies(self, student_id: str, course_id: str) -> PlaybackCredential:
        """Signed cookies covering every object under the course prefix.

        Raises:
            ForbiddenError: Student not enrolled in the course
        """
        await self.gate.require(student_id, course_id)

        private_key = await self.keys.get()
        expires_at = datetime.now(UTC) + self.cookie_expiry
        resource = self.course_resource(course_id)

        credential = PlaybackCredential(
            kind=CredentialKind.COOKIES,
            resource=resource,
            expires_at=expires_at,
            cookies=sign_cookies(resource, self.key_pair_id, private_key, expires_at),
        )

        logger.info(
            "video_cookies_issued",
            student_id=student_id,
            course_id=course_id,
            expires_at=credential.expires_at_epoch,
        )
        return credential
