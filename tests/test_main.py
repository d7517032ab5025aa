import json
import logging
from pathlib import Path

import requests

import main
from config import Settings, load_settings


def test_load_settings_defaults():
    settings = load_settings({})
    assert settings.cache_enabled is False
    assert settings.concurrency == 5
    assert settings.batch_delay == 0.2
    assert settings.birth_year_cutoff == 2005
    assert settings.roster_path == Path("www/data.csv")
    assert settings.roster_url is None


def test_load_settings_from_env():
    settings = load_settings({
        "ENABLED_CACHE": "true",
        "FIDE_CACHE_PATH": "/tmp/c.json",
        "FR_CONCURRENCY": "8",
        "FR_BATCH_DELAY": "1.5",
        "FR_BIRTH_YEAR_CUTOFF": "2007",
        "ROSTER_URL": "https://example.org/export.csv",
        "FR_LOGLEVEL": "debug",
    })
    assert settings.cache_enabled is True
    assert settings.cache_path == Path("/tmp/c.json")
    assert settings.concurrency == 8
    assert settings.batch_delay == 1.5
    assert settings.birth_year_cutoff == 2007
    assert settings.roster_url == "https://example.org/export.csv"
    assert settings.log_level == "DEBUG"


def test_load_settings_rejects_bad_numbers(caplog):
    with caplog.at_level(logging.WARNING, logger="config"):
        settings = load_settings({"FR_CONCURRENCY": "lots", "FR_BATCH_DELAY": "-1", "ENABLED_CACHE": "nope"})
    assert settings.concurrency == 5
    assert settings.batch_delay == 0.2
    assert settings.cache_enabled is False
    assert "FR_CONCURRENCY" in caplog.text


def test_orchestrate_end_to_end(tmp_path, roster_csv, fake_session, fake_response, fide_row, fide_page):
    pages = {
        "Xia, Justin": fide_page(fide_row()),
        "Tui, Aroha": fide_page(fide_row(fide_id="4100123", name="Tui, Aroha", fed="NZL", ratings=("1620", "", ""))),
    }

    def handler(url, params):
        return fake_response(pages.get(params["search"], "<div>No results</div>"))

    session = fake_session(handler)
    settings = Settings(
        cache_enabled=True,
        cache_path=tmp_path / "fide-cache.json",
        batch_delay=0,
        roster_path=roster_csv,
        report_output=tmp_path / "www" / "index.html",
    )

    summary = main.orchestrate(settings, session=session)

    # "Nobody" has country NA and "Solo" has no first name: neither is looked up
    assert sorted(c["params"]["search"] for c in session.calls) == ["Tui, Aroha", "Xia, Justin"]
    assert summary.counts["found"] == 2
    assert summary.counts["processed"] == 4
    assert summary.roster_stale is False
    assert Path(summary.report_path).exists()

    cached = json.loads((tmp_path / "fide-cache.json").read_text(encoding="utf-8"))
    assert cached["xia,justin,australia"]["fide_id"] == "12345678"
    assert cached["nobody,known,na"] is None

    # second run is served entirely from the cache
    session.calls.clear()
    again = main.orchestrate(settings, session=session)
    assert session.calls == []
    assert again.counts["cached"] == 3


def test_orchestrate_reports_stale_roster(tmp_path, roster_csv, fake_session, fake_response):
    def handler(url, params):
        if params is None:
            raise requests.ConnectionError("sheet unreachable")
        return fake_response("<div>No results</div>")

    settings = Settings(
        batch_delay=0,
        roster_path=roster_csv,
        roster_url="https://example.org/export.csv",
        report_output=tmp_path / "index.html",
    )
    summary = main.orchestrate(settings, session=fake_session(handler))

    assert summary.roster_stale is True
    assert summary.notes
    assert 'id="staleNotice"' in (tmp_path / "index.html").read_text(encoding="utf-8")


def test_orchestrate_opens_and_closes_its_own_session(tmp_path, roster_csv, fake_session, fake_response, monkeypatch):
    opened = []

    def new_session():
        session = fake_session(lambda url, params: fake_response("<div>No results</div>"))
        opened.append(session)
        return session

    monkeypatch.setattr(main.requests, "Session", new_session)
    settings = Settings(batch_delay=0, roster_path=roster_csv, report_output=tmp_path / "index.html")

    main.orchestrate(settings)
    main.orchestrate(settings)

    assert len(opened) == 2
    assert all(s.closed for s in opened)
    assert [len(s.calls) for s in opened] == [2, 2]
