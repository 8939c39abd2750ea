from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from crowstorm.errors import ConfigError
from crowstorm.main import create_app


def test_startup_runs_prefetch_before_serving(settings, tmp_path):
    settings.source_list.write_text("# no sources configured\n", encoding="utf-8")
    app = create_app(settings.model_copy(update={"prefetch_on_startup": True}))

    with TestClient(app) as client:
        assert app.state.prefetch_report is not None
        assert app.state.prefetch_report.failed == 0
        assert settings.data_dir.is_dir()
        assert client.get("/").status_code == 200


def test_unreadable_source_list_aborts_startup(settings):
    app = create_app(settings.model_copy(update={"prefetch_on_startup": True}))
    with pytest.raises(ConfigError):
        with TestClient(app):
            pass


def test_prefetch_can_be_disabled(settings):
    app = create_app(settings)
    with TestClient(app) as client:
        assert app.state.prefetch_report is None
        assert client.get("/health").json() == {"ok": True}
