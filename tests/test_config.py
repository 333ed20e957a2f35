"""
Settings loading tests.
"""

from gridslicer.config import Settings


class TestSettings:
    """Environment overrides"""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.detection.tolerance == 5
        assert settings.cleanup.shadow_width == 3
        assert settings.nine_slice.max_border == 16
        assert settings.redis_url == "redis://redis:6379/0"

    def test_nested_environment_values(self, monkeypatch):
        monkeypatch.setenv("DETECTION__TOLERANCE", "9")
        monkeypatch.setenv("CLEANUP__AGGRESSIVENESS", "60")
        monkeypatch.setenv("REDIS_HOST", "localhost")

        settings = Settings(_env_file=None)

        assert settings.detection.tolerance == 9
        assert settings.detection.min_gap_x == 50
        assert settings.cleanup.aggressiveness == 60
        assert settings.redis_url == "redis://localhost:6379/0"
