"""Shared test fixtures: canned FIDE markup and an offline HTTP session."""

from typing import Callable, List, Optional

import pytest
import requests


def make_row(
    fide_id: str = "12345678",
    name: str = "Xia, Justin",
    title: str = "",
    fed: str = "AUS",
    ratings=("1500", "1450", "1400"),
    birth_year: str = "2008",
    fed_style: str = "flag-wrapper",
) -> str:
    """One ``<tr>`` as served by incl_search_l.php."""
    if fed_style == "flag-wrapper":
        fed_cell = f'<td class="flag-wrapper" data-label="Fed"><img src="/svg/{fed}.svg" alt="{fed}" class="flag">{fed}</td>'
    elif fed_style == "data-label":
        fed_cell = f'<td data-label="Fed"><img src="/svg/{fed}.svg" alt="{fed}">{fed}</td>'
    elif fed_style == "image-only":
        fed_cell = f'<td class="flag-wrapper"><img src="/svg/{fed}.svg"></td>'
    elif fed_style == "text-only":
        fed_cell = f'<td data-label="Fed">{fed}</td>'
    else:
        fed_cell = "<td></td>"
    rating_cells = "".join(f'<td data-label="Rtg">{r}</td>' for r in ratings)
    return (
        "<tr>"
        f'<td data-label="FIDEID">{fide_id}</td>'
        f'<td data-label="Name"><a class="found_name" href="/profile/{fide_id}">{name}</a></td>'
        f'<td data-label="title">{title}</td>'
        '<td data-label="Trainer title"></td>'
        f"{fed_cell}"
        f"{rating_cells}"
        f'<td data-label="B-Year">{birth_year}</td>'
        "</tr>"
    )


def make_page(*rows: str) -> str:
    """Wrap rows in the table fragment FIDE returns."""
    return (
        '<table class="table table-striped">'
        "<thead><tr><th>FIDE ID</th><th>Name</th><th>Title</th><th>Trainer</th>"
        "<th>Fed</th><th>Std.</th><th>Rapid</th><th>Blitz</th><th>B-Year</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
    )


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, headers: Optional[dict] = None):
        self.text = text
        self.status_code = status_code
        self.headers = headers or {}
        self.encoding = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Records calls; *handler(url, params)* returns a FakeResponse or raises."""

    def __init__(self, handler: Callable):
        self.handler = handler
        self.calls: List[dict] = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self.closed = True

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        return self.handler(url, params)


@pytest.fixture
def fide_row():
    return make_row


@pytest.fixture
def fide_page():
    return make_page


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def roster_csv(tmp_path):
    """Small roster in the entry-sheet export format."""
    path = tmp_path / "data.csv"
    path.write_text(
        "All paid entries as of the 3rd of Dec,,,\n"
        "Surname, First Name, Country, Division\n"
        "Xia, Justin, Australia, U12 Open\n"
        "\n"
        "Tui, Aroha, New Zealand, U16 Girls\n"
        "Nobody, Known, NA, U10 Open\n"
        "Solo, , Fiji, U8 Open\n",
        encoding="utf-8",
    )
    return path
