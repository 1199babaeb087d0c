"""Shared fixtures for nimauth tests."""

import json
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def fake_response():
    """Factory for urlopen() return values whose read() yields a JSON body."""
    def _make(body):
        resp = MagicMock()
        resp.__enter__ = lambda s: s
        resp.__exit__ = lambda *a: None
        resp.read.return_value = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
        return resp
    return _make


@pytest.fixture
def nim_listing():
    """A typical NIM /v1/models body."""
    return {
        "object": "list",
        "data": [
            {"id": "meta/llama-3.1-70b-instruct", "object": "model", "created": 1, "owned_by": "meta",
             "max_model_len": 131072},
            {"id": "m1", "object": "model", "created": 2, "owned_by": "nvidia", "max_model_len": 2048},
            {"id": "m2", "object": "model", "created": 3, "owned_by": "nvidia"},
        ],
    }
