"""Shared fixtures: a scripted catalog client and an in-memory store."""
import json
import pytest

from litcatalog.store import InMemoryStore


class FakeClient:
    """Returns canned bodies in order and records every requested URL."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def fetch(self, url):
        self.urls.append(url)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def gutendex_body(*results, next_url=None):
    """Build a Gutendex-shaped JSON body."""
    return json.dumps({
        "count": len(results),
        "next": next_url,
        "previous": None,
        "results": list(results),
    })


def result(book_id, title, authors=(), languages=("en",), downloads=100):
    """One Gutendex result entry with author objects."""
    return {
        "id": book_id,
        "title": title,
        "authors": [{"name": name, "birth_year": None, "death_year": None} for name in authors],
        "languages": list(languages),
        "download_count": downloads,
        "subjects": [],
    }


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def body():
    return gutendex_body


@pytest.fixture
def item():
    return result
