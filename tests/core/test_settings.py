"""Tests for settings helpers."""

from learnermax.config.settings import Settings


class TestVideoDeliverySettings:
    """Reporting of missing CloudFront configuration."""

    def test_all_missing(self) -> None:
        """Every unset variable is named."""
        settings = Settings(
            cloudfront_domain=None,
            cloudfront_key_pair_id=None,
            cloudfront_private_key_secret_name=None,
        )
        assert settings.missing_video_settings == [
            "CLOUDFRONT_DOMAIN",
            "CLOUDFRONT_KEY_PAIR_ID",
            "CLOUDFRONT_PRIVATE_KEY_SECRET_NAME",
        ]
        assert settings.video_delivery_configured is False

    def test_configured(self) -> None:
        """All three set means configured."""
        settings = Settings(
            cloudfront_domain="d111.cloudfront.net",
            cloudfront_key_pair_id="K2JCJMDEHXQW5F",
            cloudfront_private_key_secret_name="learnermax/cloudfront-key",
        )
        assert settings.missing_video_settings == []
        assert settings.video_delivery_configured is True

    def test_expiry_defaults(self) -> None:
        """Signed URLs last 30 minutes and cookies a day by default."""
        settings = Settings()
        assert settings.video_url_expiry_minutes == 30
        assert settings.video_cookie_expiry_seconds == 86400
