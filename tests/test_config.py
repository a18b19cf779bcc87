# =============================================================================
# Unit Tests — Configuration & Startup Checks
# =============================================================================
#
# The service must refuse to start without a real signing secret (outside
# tests), without a secure random source, or without a reachable store.
# =============================================================================

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.config import INSECURE_DEFAULT_SECRET, Settings
from app.errors import FatalStartupError
from app.main import create_app


def _settings(tmp_path, **overrides) -> Settings:
    values = {
        "environment": "test",
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'startup.db'}",
        "hmac_secret": "startup-test-secret",
        "static_dir": str(tmp_path / "no-static"),
    }
    values.update(overrides)
    return Settings(**values)


class TestSecretValidation:
    """Tests for Settings.validate_for_startup()."""

    @pytest.mark.parametrize("environment", ["development", "production"])
    def test_unset_secret_fails(self, environment):
        settings = Settings(environment=environment, hmac_secret="")
        with pytest.raises(FatalStartupError, match="HMAC_SECRET"):
            settings.validate_for_startup()

    @pytest.mark.parametrize("environment", ["development", "production"])
    def test_placeholder_secret_fails(self, environment):
        settings = Settings(environment=environment, hmac_secret=INSECURE_DEFAULT_SECRET)
        with pytest.raises(FatalStartupError, match="placeholder"):
            settings.validate_for_startup()

    def test_real_secret_passes(self):
        settings = Settings(environment="production", hmac_secret="s3cr3t-value")
        settings.validate_for_startup()
        assert settings.hmac_secret == "s3cr3t-value"

    def test_test_environment_falls_back(self):
        settings = Settings(environment="test", hmac_secret="")
        settings.validate_for_startup()
        assert settings.hmac_secret == INSECURE_DEFAULT_SECRET

    def test_secret_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("HMAC_SECRET", "from-env")
        monkeypatch.setenv("ENVIRONMENT", "production")
        settings = Settings()
        assert settings.hmac_secret == "from-env"
        assert settings.environment == "production"


class TestStartup:
    """Lifespan startup checks run when the TestClient enters."""

    def test_missing_secret_blocks_startup(self, tmp_path):
        app = create_app(_settings(tmp_path, environment="production", hmac_secret=""))
        with pytest.raises(FatalStartupError):
            with TestClient(app):
                pass

    def test_unreachable_store_blocks_startup(self, tmp_path):
        missing = tmp_path / "missing-dir" / "keys.db"
        app = create_app(_settings(tmp_path, database_url=f"sqlite+aiosqlite:///{missing}"))
        with pytest.raises(FatalStartupError, match="unreachable"):
            with TestClient(app):
                pass

    def test_random_source_unavailable_blocks_startup(self, tmp_path):
        app = create_app(_settings(tmp_path))
        with patch("app.main.secrets.token_bytes", side_effect=NotImplementedError):
            with pytest.raises(FatalStartupError, match="random"):
                with TestClient(app):
                    pass

    def test_tables_created_on_startup(self, tmp_path):
        app = create_app(_settings(tmp_path))
        with TestClient(app) as client:
            assert client.get("/keys").status_code == 200

    def test_skipping_table_creation_surfaces_storage_error(self, tmp_path):
        app = create_app(_settings(tmp_path, db_create_tables=False))
        with TestClient(app) as client:
            response = client.get("/keys")
            assert response.status_code == 500
            assert response.json()["message"] == "Database error"


class TestEntryPoint:
    """`python -m app` hands uvicorn the app factory."""

    def test_runs_factory(self):
        from app.__main__ import main

        settings = Settings(host="127.0.0.1", port=4000, log_level="WARNING")
        with (
            patch("app.__main__.get_settings", return_value=settings),
            patch("app.__main__.uvicorn.run") as mock_run,
        ):
            main()

        mock_run.assert_called_once_with(
            "app.main:create_app",
            factory=True,
            host="127.0.0.1",
            port=4000,
            log_level="warning",
        )

    def test_no_app_built_at_import(self):
        """Importing app.main does not build an application instance."""
        import app.main as main_module

        assert not hasattr(main_module, "app")
