"""
Pytest Configuration and Fixtures

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import json
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

ENV_VARS = (
    "STATEVIZ_RING_SPACING",
    "STATEVIZ_VIEWER_PORT",
    "STATEVIZ_MACHINES",
    "STATEVIZ_PROPERTIES",
    "STATEVIZ_LOG_LEVEL",
    "STATEVIZ_LOG_PREFIX",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from STATEVIZ_* variables of the calling shell."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scenario_transitions() -> List[Dict[str, str]]:
    """Idle <-> Walk, Walk -> Jump."""
    return [
        {"from": "Idle", "to": "Walk"},
        {"from": "Walk", "to": "Idle"},
        {"from": "Walk", "to": "Jump"},
    ]


@pytest.fixture
def player_descriptor() -> Dict[str, Any]:
    """Six-state machine with mutual pairs, one-way links and a self-loop."""
    return {
        "initialState": "Idle",
        "transitions": [
            {"from": "Idle", "to": "Walk"},
            {"from": "Walk", "to": "Idle"},
            {"from": "Walk", "to": "Run"},
            {"from": "Run", "to": "Walk"},
            {"from": "Idle", "to": "Jump"},
            {"from": "Walk", "to": "Jump"},
            {"from": "Run", "to": "Jump"},
            {"from": "Jump", "to": "Fall"},
            {"from": "Fall", "to": "Land"},
            {"from": "Land", "to": "Idle"},
            {"from": "Land", "to": "Land"},
        ],
    }


@pytest.fixture
def machines_data(player_descriptor) -> Dict[str, Any]:
    return {
        "Player": player_descriptor,
        "ScenesFastForward": {
            "initialState": "Paused",
            "transitions": [
                {"from": "Paused", "to": "Playing"},
                {"from": "Playing", "to": "Paused"},
                {"from": "Playing", "to": "Seeking"},
            ],
        },
    }


@pytest.fixture
def properties_data() -> Dict[str, Any]:
    return {
        "Player": {
            "Idle": {"canJump": True, "speed": 0},
            "Walk": {"canJump": True, "speed": 1.5, "footsteps": ["left", "right"]},
            "Jump": {"impulse": {"x": 0, "y": 7.5}},
        },
        "ScenesFoastFoward": {
            "Playing": {"rate": 1.0, "skippable": True},
        },
    }


@pytest.fixture
def machines_file(temp_dir: Path, machines_data) -> Path:
    path = temp_dir / "machines.json"
    path.write_text(json.dumps(machines_data), encoding="utf-8")
    return path


@pytest.fixture
def properties_file(temp_dir: Path, properties_data) -> Path:
    path = temp_dir / "properties.json"
    path.write_text(json.dumps(properties_data), encoding="utf-8")
    return path


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Minimal stateviz.yaml so tests never pick up a user configuration."""
    path = temp_dir / "stateviz.yaml"
    path.write_text(
        "logging:\n"
        "  level: WARNING\n"
        "data:\n"
        "  machine_aliases:\n"
        "    ScenesFastForward: ScenesFoastFoward\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def swift_project(temp_dir: Path) -> Path:
    """Small source tree with a three-level class hierarchy."""
    root = temp_dir / "Sources"
    (root / "States").mkdir(parents=True)
    (root / "States" / "a.swift").write_text(
        "class BaseState {\n}\n"
        "class MovingState: BaseState {\n}\n"
        "final class RunState : MovingState {\n}\n",
        encoding="utf-8",
    )
    (root / "b.swift").write_text(
        "class IdleState: BaseState {\n    class func make() -> IdleState { IdleState() }\n}\n",
        encoding="utf-8",
    )
    (root / "notes.txt").write_text("class Ignored: BaseState\n", encoding="utf-8")
    return root
