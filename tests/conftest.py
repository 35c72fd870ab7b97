import json

import pytest

from xformer_core.config import Conf


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None, text=None):
        self.status_code = status_code
        self.headers = headers or {}
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")


class FakeSession:
    """Replays canned responses per URL, in order, and records every GET."""

    def __init__(self, responses):
        self.responses = {url: list(rs) for url, rs in responses.items()}
        self.calls = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers))
        return self.responses[url].pop(0)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def page(results, next_url=""):
    return FakeResponse(payload={"count": len(results), "next": next_url, "previous": None, "results": results})


@pytest.fixture
def config():
    return Conf(
        guidebook_api_key="secret",
        guidebook_id="42",
        api_base="https://gb.test/api",
        link_base="https://gb.test/guide/{guide_id}/?",
        guests_of_honor_id=900,
        virtual_location_ids=(1001, 1002),
    )
