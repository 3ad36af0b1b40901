"""Unit tests for engine settings."""

import pytest
from pydantic import ValidationError

from voteboard.settings import EngineSettings, get_settings


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults match the reference constants."""
        monkeypatch.delenv("VOTEBOARD_VOTING_WINDOW_SECONDS", raising=False)
        settings = EngineSettings()

        assert settings.voting_window_seconds == 7 * 24 * 3600
        assert settings.base_weight == 432
        assert settings.vote_weight == 432
        assert settings.page_size == 25
        assert settings.group_cache_ttl_seconds == 60
        assert settings.redis_db == 15

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test VOTEBOARD_ variables override defaults."""
        monkeypatch.setenv("VOTEBOARD_REDIS_URL", "redis://cache:6380")
        monkeypatch.setenv("VOTEBOARD_GROUP_CACHE_TTL_SECONDS", "5")

        settings = get_settings()

        assert settings.redis_url == "redis://cache:6380"
        assert settings.group_cache_ttl_seconds == 5

    @pytest.mark.parametrize(
        "overrides",
        [
            {"voting_window_seconds": 0},
            {"vote_weight": 0},
            {"page_size": 0},
            {"group_cache_ttl_seconds": -1},
        ],
    )
    def test_rejects_invalid_values(self, overrides: dict[str, int]) -> None:
        """Test constraint validation."""
        with pytest.raises(ValidationError):
            EngineSettings(**overrides)
