from __future__ import annotations

import logging

import httpx
import pytest

from crowstorm.errors import ConfigError
from prefetch import pipeline
from prefetch.cli import main as prefetch_main


def _by_exchange(request: httpx.Request) -> httpx.Response:
    exchange = request.url.params["exchange"]
    if exchange == "NYSE":
        raise httpx.ConnectTimeout("connect timed out", request=request)
    return httpx.Response(200, content=f"{exchange} rows\n".encode())


def test_run_downloads_each_source(source_list, tmp_path, mock_http):
    data_dir = tmp_path / "data"
    report = pipeline.run(source_list, data_dir, client=mock_http(_by_exchange))

    assert report.succeeded == 1
    assert report.failed == 1
    assert (data_dir / "NASDAQ.csv").read_bytes() == b"NASDAQ rows\n"
    failed = [r for r in report.results if not r.ok]
    assert failed[0].error_code == "timeout"


def test_run_creates_data_dir(tmp_path, mock_http):
    config = tmp_path / "sources.txt"
    config.write_text("# nothing yet\n", encoding="utf-8")
    data_dir = tmp_path / "nested" / "data"
    report = pipeline.run(config, data_dir, client=mock_http(_by_exchange))
    assert data_dir.is_dir()
    assert report.results == []


def test_run_logs_summary(source_list, tmp_path, mock_http, caplog):
    caplog.set_level(logging.INFO)
    pipeline.run(source_list, tmp_path / "data", client=mock_http(_by_exchange))
    summaries = [r for r in caplog.records if getattr(r, "event", None) == "prefetch_summary"]
    assert len(summaries) == 1
    assert summaries[0].succeeded == 1
    assert summaries[0].failed == 1


def test_missing_config_aborts(tmp_path, mock_http):
    with pytest.raises(ConfigError):
        pipeline.run(tmp_path / "missing.txt", tmp_path / "data", client=mock_http(_by_exchange))
    assert not (tmp_path / "data").exists()


def test_cli_exit_code_on_config_error(tmp_path):
    code = prefetch_main(["--sources", str(tmp_path / "missing.txt"), "--data-dir", str(tmp_path)])
    assert code == 2


def test_cli_exit_code_with_nothing_to_fetch(tmp_path):
    config = tmp_path / "sources.txt"
    config.write_text("# empty\n", encoding="utf-8")
    code = prefetch_main(["--sources", str(config), "--data-dir", str(tmp_path / "data")])
    assert code == 0
