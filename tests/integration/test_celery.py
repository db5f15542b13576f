"""Integration tests for the Celery configuration."""

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _celery_eager(settings):
    """Run tasks synchronously inside the test process."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


class TestCeleryConfig:
    """Celery loads through the Django settings."""

    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "order_backend"

    def test_celery_broker_url_configured(self, settings):
        assert settings.CELERY_BROKER_URL is not None
        assert "redis" in settings.CELERY_BROKER_URL

    def test_celery_result_backend_configured(self, settings):
        assert settings.CELERY_RESULT_BACKEND is not None
        assert "redis" in settings.CELERY_RESULT_BACKEND

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_outbox_publisher_is_scheduled(self, settings):
        entry = settings.CELERY_BEAT_SCHEDULE["publish-outbox-events"]
        assert entry["task"] == "core.publish_outbox_events"
        assert entry["schedule"] > 0

    def test_outbox_task_is_registered(self):
        from config.celery import app
        from modules.core.tasks import publish_outbox_events

        assert app.tasks["core.publish_outbox_events"].name == publish_outbox_events.name

