"""
Annotation Gateway - Configuration & Startup Tests
====================================================

What:  Tests for Settings validation and the startup behavior around it.
How:   Settings are built directly (no .env file); the lifespan is entered
       with app.router.lifespan_context so startup/shutdown run in-process.

What we test:
    ✅ Required-value validation lists every problem
    ✅ Degraded mode: server starts, remote calls fail without network I/O
    ✅ Strict mode: startup raises
"""

import pytest
from httpx import ASGITransport, AsyncClient

from annotation_gateway.config import Settings
from annotation_gateway.main import create_app
from annotation_gateway.services.github_client import GitHubContentClient


def build_settings(**overrides):
    options = {
        "github_token": "test-token",
        "github_repo": "test-owner/test-repo",
        "_env_file": None,
    }
    options.update(overrides)
    return Settings(**options)


class TestSettingsValidation:

    def test_valid_configuration_passes(self):
        settings = build_settings()
        settings.validate_required()
        assert settings.is_configured

    def test_missing_token_and_repo_both_reported(self):
        settings = build_settings(github_token="", github_repo="")
        with pytest.raises(ValueError) as exc_info:
            settings.validate_required()
        message = str(exc_info.value)
        assert "GITHUB_TOKEN" in message
        assert "GITHUB_REPO" in message

    @pytest.mark.parametrize("repo", ["just-a-name", "owner/", "/repo", "a/b/c"])
    def test_malformed_repo_rejected(self, repo):
        settings = build_settings(github_repo=repo)
        assert not settings.has_valid_repo
        with pytest.raises(ValueError, match="invalid"):
            settings.validate_required()

    def test_placeholder_token_is_unset(self):
        settings = build_settings(github_token="your_github_token_here")
        assert not settings.has_token
        assert not settings.is_configured

    def test_log_level_is_normalized(self):
        assert build_settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValueError):
            build_settings(log_level="chatty")

    def test_repo_api_url(self):
        settings = build_settings(github_api_url="https://api.github.com/")
        assert settings.repo_api_url == "https://api.github.com/repos/test-owner/test-repo"

    def test_cors_origins_list(self):
        settings = build_settings(cors_origins="http://a.test, http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class TestStartup:

    @pytest.mark.asyncio
    async def test_lifespan_builds_github_client(self, tmp_path):
        app = create_app(settings=build_settings(static_dir=str(tmp_path), log_level="WARNING"))

        async with app.router.lifespan_context(app):
            assert isinstance(app.state.gateway.client, GitHubContentClient)
        assert app.state.gateway is None

    @pytest.mark.asyncio
    async def test_degraded_mode_serves_requests(self, tmp_path):
        """Missing credentials: process stays up, remote calls fail as errors."""
        app = create_app(settings=build_settings(
            github_token="", static_dir=str(tmp_path), log_level="WARNING",
        ))

        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                annotated = await client.get("/api/annotated")
                images = await client.get("/api/images")
                health = await client.get("/health")

        assert annotated.status_code == 200
        assert annotated.json() == []
        assert images.status_code == 500
        assert health.json()["remote"] == "unconfigured"
        assert health.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_strict_mode_refuses_to_start(self, tmp_path):
        app = create_app(settings=build_settings(
            github_repo="", strict_config=True, static_dir=str(tmp_path), log_level="WARNING",
        ))

        with pytest.raises(ValueError, match="GITHUB_REPO"):
            async with app.router.lifespan_context(app):
                pass
