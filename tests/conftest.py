import json
from contextlib import ExitStack

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from tests.stubs import NewsStub, make_openai


@pytest.fixture()
def settings():
    return Settings(news_api_key="news-key", ai_provider="openai", openai_api_key="openai-key")


@pytest.fixture()
def news_stub():
    return NewsStub()


@pytest.fixture()
def openai_stub():
    return make_openai(json.dumps({
        "summary100": "Chips got faster.",
        "sentiment": "Positive",
        "takeaways": ["Faster", "Cheaper", "Smaller"],
    }))


@pytest.fixture()
def make_client():
    """Build a TestClient around the app with stubbed upstreams."""
    with ExitStack() as stack:
        def _make(settings, news_stub=None, openai_stub=None, raise_server_exceptions=True):
            http = httpx.AsyncClient(transport=httpx.MockTransport(news_stub or NewsStub()))
            app = create_app(settings, http_client=http, openai_client=openai_stub or make_openai("{}"))
            client = stack.enter_context(TestClient(app, raise_server_exceptions=raise_server_exceptions))
            # runs before the client exits, while its event loop is still up
            stack.callback(client.portal.call, http.aclose)
            return client

        yield _make


@pytest.fixture()
def client(make_client, settings, news_stub, openai_stub):
    return make_client(settings, news_stub, openai_stub)
