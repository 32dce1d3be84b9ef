"""
Test fixtures and utilities for charme_annotator tests.

Provides a scripted HTTP transport, an in-memory map surface and factories
for wired-up session managers and controllers.
"""

import asyncio
import inspect
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from charme_annotator.core.annotation import (
    AnnotationController,
    Bounds,
    CharmeNodeClient,
    LngLat,
    MapSurface,
    Response,
    SessionManager,
    SessionState,
    Transport,
)
from charme_annotator.interfaces.token_store import MemoryTokenStore

NODE_URL = "http://node.example.org/"
QUERY_PREFIX = NODE_URL + "sparql"
INSERT_URL = NODE_URL + "insert/annotation"
USERINFO_URL = NODE_URL + "token/userinfo"


@dataclass
class Call:
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[str]


class ScriptedTransport(Transport):
    """
    Transport answering from a script of routes.

    Each route matches a method and URL prefix and holds a list of outcomes,
    used in order (the last one repeats). An outcome is a Response, an
    exception to raise, or a callable returning either (possibly async).
    """

    def __init__(self):
        self.calls: List[Call] = []
        self._routes = []

    def route(self, method: str, url_prefix: str, *outcomes):
        self._routes.append((method, url_prefix, list(outcomes)))
        return self

    def calls_to(self, url_prefix: str) -> List[Call]:
        return [c for c in self.calls if c.url.startswith(url_prefix)]

    async def request(self, method, url, headers=None, body=None):
        self.calls.append(Call(method, url, dict(headers or {}), body))
        for route_method, prefix, outcomes in self._routes:
            if route_method == method and url.startswith(prefix):
                outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
                break
        else:
            raise AssertionError(f"Unexpected request {method} {url}")

        if callable(outcome) and not isinstance(outcome, Response):
            outcome = outcome()
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@dataclass(eq=False)
class FakeLayer:
    kind: str
    payload: Any
    popup: Optional[str] = None


@dataclass
class FakeForm:
    layer: FakeLayer
    on_submit: Any
    on_dismiss: Any


class FakeMap(MapSurface):
    """Map surface keeping layers in a list."""

    def __init__(self, bounds: Optional[Bounds] = None):
        self.layers: List[FakeLayer] = []
        self.forms: List[FakeForm] = []
        self.drawing_enabled = None
        self.bounds = bounds or Bounds(LngLat(-10, 40), LngLat(10, 60))
        self._draw_handlers = []

    # MapSurface

    def on_draw_created(self, handler):
        self._draw_handlers.append(handler)

    def set_drawing_enabled(self, enabled):
        self.drawing_enabled = enabled

    def get_bounds(self):
        return self.bounds

    def shape_layer(self, shape):
        return FakeLayer("shape", shape)

    def annotation_layer(self, record, popup_html):
        return FakeLayer("annotation", record, popup_html)

    def add_layer(self, layer):
        self.layers.append(layer)

    def remove_layer(self, layer):
        if layer in self.layers:
            self.layers.remove(layer)

    def open_comment_form(self, layer, on_submit, on_dismiss):
        self.forms.append(FakeForm(layer, on_submit, on_dismiss))

    # Test helpers

    def draw(self, shape):
        for handler in self._draw_handlers:
            handler(shape)

    def submit_form(self, comment):
        form = self.forms.pop()
        form.on_submit(comment)

    def dismiss_form(self):
        form = self.forms.pop()
        form.on_dismiss()

    def layers_of(self, kind):
        return [layer for layer in self.layers if layer.kind == kind]


def point_feature(lng, lat, **properties):
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lng, lat]},
        "properties": properties,
    }


def geojson_response(features, status=200):
    body = json.dumps({"type": "FeatureCollection", "features": list(features)})
    return Response(status=status, body=body)


def userinfo_response(**overrides):
    data = {"username": "jdoe", "first_name": "Jane", "last_name": "Doe"}
    data.update(overrides)
    return Response(status=200, body=json.dumps(data))


async def drain(steps: int = 10):
    """Let scheduled tasks run."""
    for _ in range(steps):
        await asyncio.sleep(0)


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def token_store():
    return MemoryTokenStore()


@pytest.fixture
def fake_map():
    return FakeMap()


@pytest.fixture
def client(transport):
    return CharmeNodeClient(NODE_URL, transport)


@pytest.fixture
def open_url():
    return []


@pytest.fixture
def session(client, token_store, open_url):
    return SessionManager(
        client,
        token_store,
        client_id="client-123",
        redirect_uri="http://localhost:8888/",
        open_url=open_url.append,
    )


@pytest.fixture
def logged_in_session(session):
    """Session holding a token, as after check_cached_token()."""
    session.token = "tok"
    session.state = SessionState.LOGGED_IN
    return session


@pytest.fixture
def make_controller(fake_map, logged_in_session, client):
    def factory(query_mode="dataset", **kwargs):
        return AnnotationController(
            fake_map, logged_in_session, client, query_mode=query_mode, **kwargs
        )

    return factory


@pytest.fixture
def controller(make_controller):
    return make_controller()
