"""
Machine Registry - Named state machine descriptors

A descriptor is {"initialState": str, "transitions": [{"from": str, "to": str}]}.
Registries load from one JSON/YAML file mapping names to descriptors, or from
a directory holding one file per machine (file stem = machine name).

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

import yaml

from .errors import DescriptorError, MachineNotFoundError
from .state_graph import StateGraph, as_transition, build_state_graph

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIXES = (".json", ".yaml", ".yml")


def _read_structured(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DescriptorError(f"Cannot parse {path}: {e}") from e


def validate_descriptor(name: str, data: Any) -> Dict[str, Any]:
    """Check the descriptor shape; transitions content is left to the builder."""
    if not isinstance(data, Mapping):
        raise DescriptorError(f"Machine '{name}': descriptor must be a mapping")
    transitions = data.get("transitions", [])
    if transitions is None:
        transitions = []
    if not isinstance(transitions, list):
        raise DescriptorError(f"Machine '{name}': 'transitions' must be a list")
    initial = data.get("initialState", "")
    if not isinstance(initial, str):
        raise DescriptorError(f"Machine '{name}': 'initialState' must be a string")
    return {"initialState": initial, "transitions": transitions}


class MachineRegistry:
    """Machine descriptors keyed by machine name, in insertion order."""

    def __init__(self, machines: Optional[Mapping[str, Any]] = None):
        self._machines: Dict[str, Dict[str, Any]] = {}
        for name, data in (machines or {}).items():
            self.add(name, data)

    @classmethod
    def from_path(cls, path: Path) -> "MachineRegistry":
        """
        Load a registry from a file or a directory.

        Args:
            path: JSON/YAML file {name: descriptor}, or a directory of
                  <name>.json / <name>.yaml files

        Returns:
            MachineRegistry
        """
        path = Path(path)
        registry = cls()

        if path.is_dir():
            for file_path in sorted(path.iterdir()):
                if file_path.is_file() and file_path.suffix in DESCRIPTOR_SUFFIXES:
                    registry.add(file_path.stem, _read_structured(file_path))
        elif path.is_file():
            data = _read_structured(path)
            if not isinstance(data, Mapping):
                raise DescriptorError(f"{path}: expected a mapping of machine names")
            for name, descriptor in data.items():
                registry.add(str(name), descriptor)
        else:
            raise DescriptorError(f"Machine path not found: {path}")

        logger.info(f"Loaded {len(registry)} machines from {path}")
        return registry

    def add(self, name: str, descriptor: Any) -> None:
        self._machines[name] = validate_descriptor(name, descriptor)

    def names(self) -> List[str]:
        return list(self._machines)

    def get(self, name: str) -> Dict[str, Any]:
        try:
            return self._machines[name]
        except KeyError:
            raise MachineNotFoundError(name) from None

    def states(self, name: str) -> List[str]:
        """Sorted distinct states named by the machine's transitions."""
        states = set()
        for item in self.get(name)["transitions"]:
            pair = as_transition(item)
            if pair is not None:
                states.update(pair)
        return sorted(states)

    def build(self, name: str) -> StateGraph:
        """Fresh graph for a machine; nothing is cached between calls."""
        return build_state_graph(self.get(name))

    def default_name(self, preferred: Optional[str] = None) -> Optional[str]:
        if preferred and preferred in self._machines:
            return preferred
        return next(iter(self._machines), None)

    def __contains__(self, name: object) -> bool:
        return name in self._machines

    def __iter__(self) -> Iterator[str]:
        return iter(self._machines)

    def __len__(self) -> int:
        return len(self._machines)

    def __repr__(self) -> str:
        return f"MachineRegistry({len(self._machines)} machines)"
