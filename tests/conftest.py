from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
import requests


def make_response(status_code: int = 200, body: bytes | str | dict = b"", url: str = "http://test") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if isinstance(body, dict):
        body = json.dumps(body)
    if isinstance(body, str):
        body = body.encode("utf-8")
    response._content = body
    return response


def drone_xml(drones: list[tuple[str, float, float]], timestamp: str = "2022-12-14T10:00:00.000Z") -> str:
    entries = "".join(
        f"<drone><serialNumber>{sn}</serialNumber><model>HRP-DP</model>"
        f"<manufacturer>ProDröne Ltd</manufacturer>"
        f"<positionY>{y}</positionY><positionX>{x}</positionX>"
        f"<altitude>4522.33</altitude></drone>"
        for sn, x, y in drones
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        "<report>"
        '<deviceInformation deviceId="GUARDB1RD"><listenRange>500000</listenRange></deviceInformation>'
        f'<capture snapshotTimestamp="{timestamp}">{entries}</capture>'
        "</report>"
    )


class FakeSession:
    """Stands in for requests.Session; answers from a URL -> response map."""

    def __init__(self, responses: dict | None = None, default=None) -> None:
        self.responses = responses or {}
        self.default = default
        self.calls: list[str] = []

    def get(self, url, timeout=None, **kwargs):
        self.calls.append(url)
        result = self.responses.get(url, self.default)
        if isinstance(result, Exception):
            raise result
        if result is None:
            return make_response(404, b"")
        return result


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def t0() -> datetime:
    return datetime(2022, 12, 14, 10, 0, 0, tzinfo=timezone.utc)
