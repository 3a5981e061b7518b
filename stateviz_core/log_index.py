"""
Log Index - Machine/state/attribute table from property dump logs

Each relevant log line looks like `<prefix><Machine>.<State>.<Attribute>,<n>`.
The index maps machine -> state -> attribute names in encounter order.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List

from .errors import ExtractionError

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "playerStateMachine"

StateMachineData = Dict[str, Dict[str, List[str]]]


def compile_line_pattern(prefix: str = DEFAULT_PREFIX) -> re.Pattern:
    return re.compile(rf"^{re.escape(prefix)}(\w+)\.([\w\d]+)\.(\w+),\d+$")


def index_log_lines(lines: Iterable[str], prefix: str = DEFAULT_PREFIX) -> StateMachineData:
    """Group attribute names by machine and state; unmatched lines are skipped."""
    pattern = compile_line_pattern(prefix)
    machines: StateMachineData = {}
    skipped = 0
    for line in lines:
        match = pattern.match(line.rstrip("\r\n"))
        if not match:
            skipped += 1
            continue
        machine, state, attribute = match.groups()
        machines.setdefault(machine, {}).setdefault(state, []).append(attribute)
    logger.debug(f"Indexed {len(machines)} machines, skipped {skipped} lines")
    return machines


def index_log_file(input_file: Path, output_file: Path, prefix: str = DEFAULT_PREFIX) -> StateMachineData:
    """
    Index a log file and write the result as indented JSON.

    Args:
        input_file: Line-oriented log
        output_file: JSON destination; its directory must exist
        prefix: Line prefix preceding the machine name

    Returns:
        The index that was written
    """
    input_file = Path(input_file)
    output_file = Path(output_file)

    if not input_file.is_file():
        raise ExtractionError(f"Input file {input_file} does not exist.")
    output_dir = output_file.parent
    if not output_dir.is_dir():
        raise ExtractionError(f"Output directory {output_dir} does not exist.")

    with input_file.open("r", encoding="utf-8", errors="replace") as f:
        machines = index_log_lines(f, prefix)

    output_file.write_text(json.dumps(machines, indent=2), encoding="utf-8")
    logger.info(f"Processed data written to {output_file}")
    return machines
