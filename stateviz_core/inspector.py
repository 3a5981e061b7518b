"""
Inspector - Per-state property bag for the viewer's side panel

Properties are keyed machine -> state -> property name -> value, where a value
is a boolean, number, string, array or object. Values are classified once and
rendered either as plain dicts (API) or HTML fragments (standalone viewer).

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import html
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .errors import DescriptorError

logger = logging.getLogger(__name__)


class PropertyKind(str, Enum):
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


@dataclass
class PropertyView:
    """Display form of one property."""
    name: str
    kind: PropertyKind
    display: str = ""
    items: List["PropertyView"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "kind": self.kind.value, "display": self.display}
        if self.kind == PropertyKind.ARRAY:
            data["items"] = [item.to_dict() for item in self.items]
        return data


def classify(value: Any) -> PropertyKind:
    # bool first: bool is an int subclass
    if isinstance(value, bool):
        return PropertyKind.BOOLEAN
    if isinstance(value, (int, float)):
        return PropertyKind.NUMBER
    if isinstance(value, str):
        return PropertyKind.STRING
    if isinstance(value, (list, tuple)):
        return PropertyKind.ARRAY
    if isinstance(value, Mapping):
        return PropertyKind.OBJECT
    return PropertyKind.UNKNOWN


def describe_property(name: str, value: Any) -> PropertyView:
    """Classify a value and compute its display text."""
    kind = classify(value)
    if kind == PropertyKind.BOOLEAN:
        return PropertyView(name, kind, "true" if value else "false")
    if kind == PropertyKind.NUMBER:
        return PropertyView(name, kind, f"{value:.2f}")
    if kind == PropertyKind.STRING:
        return PropertyView(name, kind, value)
    if kind == PropertyKind.ARRAY:
        items = [describe_property(f"{name}[{i}]", item) for i, item in enumerate(value)]
        return PropertyView(name, kind, items=items)
    if kind == PropertyKind.OBJECT:
        return PropertyView(name, kind, json.dumps(value, indent=2))
    return PropertyView(name, kind, "Unknown type")


def describe_properties(properties: Mapping[str, Any]) -> List[PropertyView]:
    return [describe_property(name, value) for name, value in properties.items()]


def _render_view(view: PropertyView) -> str:
    name = html.escape(view.name)
    if view.kind == PropertyKind.BOOLEAN:
        checked = " checked" if view.display == "true" else ""
        return f'<div class="prop prop-bool"><input type="checkbox" disabled{checked}> <span class="prop-name">{name}</span></div>'
    if view.kind == PropertyKind.ARRAY:
        inner = "".join(_render_view(item) for item in view.items)
        return f'<div class="prop prop-array"><span class="prop-name">{name}:</span><div class="prop-items">{inner}</div></div>'
    if view.kind == PropertyKind.OBJECT:
        return f'<div class="prop prop-object"><span class="prop-name">{name}:</span><pre>{html.escape(view.display)}</pre></div>'
    return (f'<div class="prop prop-{view.kind.value}"><span class="prop-name">{name}: </span>'
            f'<span class="prop-value">{html.escape(view.display)}</span></div>')


def render_properties_html(state: str, properties: Optional[Mapping[str, Any]]) -> str:
    """HTML for the inspector panel of one state."""
    if not properties:
        return "<p>No properties to display</p>"
    body = "".join(_render_view(view) for view in describe_properties(properties))
    return f"<h3>{html.escape(state)}</h3>{body}"


class PropertyStore:
    """
    Inspector properties keyed by machine then state.

    Aliases map a machine name onto the key used in the property file when
    the two are spelled differently.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None,
                 aliases: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, Any] = dict(values or {})
        self.aliases: Dict[str, str] = dict(aliases or {})

    @classmethod
    def from_file(cls, path: Path, aliases: Optional[Mapping[str, str]] = None) -> "PropertyStore":
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise DescriptorError(f"Property file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise DescriptorError(f"Cannot parse {path}: {e}") from e
        if not isinstance(data, dict):
            raise DescriptorError(f"{path}: expected a mapping of machine names")
        logger.info(f"Loaded properties for {len(data)} machines from {path}")
        return cls(data, aliases)

    def resolve_machine(self, machine: str) -> str:
        return self.aliases.get(machine, machine)

    def lookup(self, machine: str, state: Optional[str]) -> Optional[Dict[str, Any]]:
        """Properties of a state, or None when there is nothing to show."""
        if not state:
            return None
        states = self._values.get(self.resolve_machine(machine))
        if not isinstance(states, Mapping):
            return None
        props = states.get(state)
        return dict(props) if isinstance(props, Mapping) else None

    def machine_states(self, machine: str) -> Dict[str, Any]:
        states = self._values.get(self.resolve_machine(machine))
        return dict(states) if isinstance(states, Mapping) else {}

    def __len__(self) -> int:
        return len(self._values)
