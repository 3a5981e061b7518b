"""
Class Index - Regex-based inheritance extraction

Scans source files for `class Name: Base` / `class Name extends Base`
declarations, builds the inheritance tree below a base class and exports it
as JSON, Mermaid, DOT, force-graph JSON and CSV.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import json
import logging
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import ExtractionError

logger = logging.getLogger(__name__)

CLASS_PATTERN = re.compile(r"class\s+(\w+)(?:\s*(?:extends|:)\s*(\w+))?")

ClassIndex = Dict[str, List[str]]  # base class -> direct subclasses (encounter order)
ClassTree = Dict[str, List[str]]   # class -> direct children, reachable from the root


def _iter_source_files(root: Path, extensions: Sequence[str]) -> Iterable[Path]:
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            yield from _iter_source_files(entry, extensions)
        elif entry.suffix in extensions:
            yield entry


def index_source(content: str, index: ClassIndex, pattern: re.Pattern = CLASS_PATTERN) -> int:
    """Add the subclass declarations found in content; returns how many."""
    found = 0
    for match in pattern.finditer(content):
        class_name, base_class = match.group(1), match.group(2)
        if base_class:
            index.setdefault(base_class, []).append(class_name)
            logger.debug(f"Found subclass: {class_name} of base class: {base_class}")
            found += 1
    return found


def index_classes(
    root: Path,
    extensions: Sequence[str] = (".swift",),
    pattern: re.Pattern = CLASS_PATTERN,
) -> ClassIndex:
    """
    Index subclass declarations under a directory.

    Args:
        root: Directory to scan recursively
        extensions: File suffixes to read
        pattern: Regex with groups (class, base)

    Returns:
        {base_class: [subclass, ...]}
    """
    root = Path(root)
    if not root.is_dir():
        raise ExtractionError(f"Root directory not found: {root}")

    index: ClassIndex = {}
    for file_path in _iter_source_files(root, tuple(extensions)):
        logger.info(f"Processing file: {file_path.name}")
        try:
            content = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Cannot read {file_path}: {e}")
            continue
        index_source(content, index, pattern)
    return index


def build_inheritance_tree(class_index: ClassIndex, base_class: str) -> ClassTree:
    """Breadth-first tree of everything deriving from base_class."""
    tree: ClassTree = {}
    queue = deque([base_class])
    while queue:
        current = queue.popleft()
        if current in tree:
            continue
        subclasses = list(class_index.get(current, []))
        tree[current] = subclasses
        queue.extend(subclasses)
    return tree


# Exporters

def to_mermaid(tree: ClassTree) -> str:
    lines = ["classDiagram"]
    for parent, children in tree.items():
        for child in children:
            lines.append(f"    {parent} <|-- {child}")
    return "\n".join(lines) + "\n"


def to_dot(tree: ClassTree, name: str = "Inheritance") -> str:
    lines = [f'digraph "{name}" {{']
    lines.append("  rankdir=BT;")
    lines.append("  node [shape=box, style=filled, fillcolor=\"#FFD700\"];")
    lines.append("  edge [arrowhead=empty, color=\"#3498db\"];")
    for parent, children in tree.items():
        lines.append(f'  "{parent}";')
        for child in children:
            lines.append(f'  "{child}" -> "{parent}";')
    lines.append("}")
    return "\n".join(lines) + "\n"


@dataclass
class ForceGraphData:
    """Node/link document consumed by force-directed renderers."""
    nodes: List[Dict[str, Any]] = field(default_factory=list)
    links: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"nodes": self.nodes, "links": self.links}


def to_force_graph(tree: ClassTree) -> ForceGraphData:
    data = ForceGraphData()
    added = set()

    def add_node(name: str) -> None:
        if name not in added:
            data.nodes.append({"id": name, "name": name, "val": 1})
            added.add(name)

    for parent, children in tree.items():
        add_node(parent)
        for child in children:
            add_node(child)
            data.links.append({"source": parent, "target": child})
    return data


def to_csv(data: ForceGraphData) -> Tuple[str, str]:
    """(edge list CSV, node id -> label CSV)."""
    links = ["source,target"]
    links.extend(f"{link['source']},{link['target']}" for link in data.links)
    metadata = ["id,label"]
    metadata.extend(f"{node['id']},{node['name']}" for node in data.nodes)
    return "\n".join(links) + "\n", "\n".join(metadata) + "\n"


def write_outputs(tree: ClassTree, base_class: str, output_dir: Path) -> Dict[str, Path]:
    """
    Write every export of a tree next to each other.

    Args:
        tree: Inheritance tree
        base_class: Root class, used as file name stem
        output_dir: Existing directory

    Returns:
        {format: path}
    """
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        raise ExtractionError(f"Output directory does not exist: {output_dir}")

    force_graph = to_force_graph(tree)
    links_csv, metadata_csv = to_csv(force_graph)
    outputs = {
        "json": (output_dir / f"{base_class}.json", json.dumps(tree, indent=2)),
        "mermaid": (output_dir / f"{base_class}.mm", to_mermaid(tree)),
        "dot": (output_dir / f"{base_class}.dot", to_dot(tree, base_class)),
        "force_graph": (output_dir / f"{base_class}_nodes.json", json.dumps(force_graph.to_dict(), indent=2)),
        "links_csv": (output_dir / f"{base_class}_links.csv", links_csv),
        "metadata_csv": (output_dir / f"{base_class}_metadata.csv", metadata_csv),
    }

    written = {}
    for key, (path, content) in outputs.items():
        path.write_text(content, encoding="utf-8")
        logger.info(f"Saved {key} to: {path}")
        written[key] = path
    return written


def extract_inheritance(
    root: Path,
    base_class: str,
    output_dir: Optional[Path] = None,
    extensions: Sequence[str] = (".swift",),
) -> Tuple[ClassTree, Dict[str, Path]]:
    """Index, build the tree below base_class and write all exports."""
    logger.info(f"Starting analysis for base class: {base_class}")
    class_index = index_classes(root, extensions)
    tree = build_inheritance_tree(class_index, base_class)
    logger.info(f"Inheritance tree built: {len(tree)} classes")
    written = write_outputs(tree, base_class, Path(output_dir) if output_dir else Path.cwd())
    return tree, written
