"""
Tests for the viewer server API

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import pytest
from fastapi.testclient import TestClient

from stateviz_cli.viewer_server import create_app, load_sources
from stateviz_core.config import StateVizConfig
from stateviz_core.errors import DescriptorError
from stateviz_core.inspector import PropertyStore
from stateviz_core.machines import MachineRegistry


@pytest.fixture
def client(machines_data, properties_data):
    registry = MachineRegistry(machines_data)
    store = PropertyStore(properties_data, {"ScenesFastForward": "ScenesFoastFoward"})
    return TestClient(create_app(registry, store))


class TestMachineRoutes:
    def test_list(self, client):
        response = client.get("/api/machines")
        assert response.status_code == 200
        assert response.json() == {"machines": ["Player", "ScenesFastForward"], "default": "Player"}

    def test_payload(self, client):
        data = client.get("/api/machines/Player").json()
        assert data["initialState"] == "Idle"
        assert len(data["nodes"]) == 6
        assert data["stats"]["mutual_pairs"] == 2
        assert data["distances"]["Idle"]["Fall"] == 2

    def test_unknown_machine(self, client):
        response = client.get("/api/machines/Nope")
        assert response.status_code == 404
        assert "Nope" in response.json()["detail"]

    def test_states(self, client):
        data = client.get("/api/machines/ScenesFastForward/states").json()
        assert data["states"] == ["Paused", "Playing", "Seeking"]
        assert client.get("/api/machines/Nope/states").status_code == 404


class TestStateRoutes:
    def test_state_details(self, client):
        data = client.get("/api/machines/Player/states/Walk").json()
        assert data["properties"]["speed"] == 1.5
        assert set(data["neighbors"]) == {"Idle", "Run", "Jump"}
        assert data["degree"] == 5
        assert data["distance"] == 1
        assert "footsteps[0]" in data["html"]
        assert {v["name"] for v in data["views"]} == {"canJump", "speed", "footsteps"}

    def test_state_without_properties(self, client):
        data = client.get("/api/machines/Player/states/Fall").json()
        assert data["properties"] is None
        assert data["views"] == []
        assert data["html"] == "<p>No properties to display</p>"

    def test_aliased_properties(self, client):
        data = client.get("/api/machines/ScenesFastForward/states/Playing").json()
        assert data["properties"] == {"rate": 1.0, "skippable": True}

    def test_unknown_state(self, client):
        assert client.get("/api/machines/Player/states/Swim").status_code == 404

    def test_distances(self, client):
        data = client.get("/api/machines/Player/distances/Fall").json()
        assert data["from"] == "Fall"
        assert data["distances"]["Fall"] == 0
        assert data["distances"]["Idle"] == 2
        assert client.get("/api/machines/Player/distances/Swim").status_code == 404

    def test_unreachable_distance_is_null(self):
        registry = MachineRegistry({"Split": {"initialState": "A", "transitions": [["A", "B"], ["C", "D"]]}})
        client = TestClient(create_app(registry))
        data = client.get("/api/machines/Split/states/C").json()
        assert data["distance"] is None


class TestIndexPage:
    def test_renders_default_machine(self, machines_data):
        config = StateVizConfig()
        config.viewer.default_machine = "ScenesFastForward"
        client = TestClient(create_app(MachineRegistry(machines_data), config=config))
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert 'let machineName = "ScenesFastForward";' in response.text
        assert 'const API_BASE = "/api";' in response.text

    def test_no_machines(self):
        client = TestClient(create_app(MachineRegistry()))
        assert client.get("/").status_code == 404


class TestLoadSources:
    def test_from_config(self, machines_file, properties_file):
        config = StateVizConfig()
        config.data.machines_path = str(machines_file)
        config.data.properties_path = str(properties_file)
        config.data.machine_aliases = {"ScenesFastForward": "ScenesFoastFoward"}
        registry, store = load_sources(config)
        assert len(registry) == 2
        assert store.lookup("ScenesFastForward", "Playing") is not None

    def test_requires_machines(self):
        with pytest.raises(DescriptorError):
            load_sources(StateVizConfig())
