from __future__ import annotations

import importlib

import pytest
from fastapi.testclient import TestClient

from desmos_gallery.graph_store import GraphStore


gallery_module = importlib.import_module("desmos_gallery.app")


@pytest.fixture()
def store(tmp_path):
    return GraphStore(tmp_path / "data" / "graphs.json")


@pytest.fixture()
def client(store, monkeypatch):
    monkeypatch.setattr(gallery_module, "graph_store", store)
    return TestClient(gallery_module.app)
