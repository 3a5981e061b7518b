"""
Logging Utilities for StateViz

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class LogLevel(str, Enum):
    """Log levels for StateViz tools."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI entry points."""
    try:
        numeric = getattr(logging, LogLevel(level.upper()).value)
    except ValueError:
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT, force=True)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class RunLogger:
    """
    File-based log of tool runs with structured JSONL support.

    Logs are written to:
    - {log_dir}/runs.log - Human-readable text log
    - {log_dir}/{events_log} - Structured JSONL log
    """

    def __init__(self, log_dir: Path, min_level: LogLevel = LogLevel.INFO,
                 events_log: str = "events.jsonl"):
        """
        Initialize run logger.

        Args:
            log_dir: Directory for log files
            min_level: Minimum log level to write
            events_log: File name of the JSONL log
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.min_level = min_level

        self.text_log = self.log_dir / "runs.log"
        self.json_log = self.log_dir / events_log

    def _should_log(self, level: LogLevel) -> bool:
        levels = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARNING, LogLevel.ERROR]
        return levels.index(level) >= levels.index(self.min_level)

    def log_text(self, line: str, level: LogLevel = LogLevel.INFO):
        """Append a timestamped line to the text log."""
        if not self._should_log(level):
            return
        with self.text_log.open("a", encoding="utf-8") as f:
            f.write(f"[{_timestamp()}] [{level.value}] {line}\n")

    def log_jsonl(self, event_type: str, data: Dict[str, Any], level: LogLevel = LogLevel.INFO):
        """
        Append structured JSONL event to the events log.

        Args:
            event_type: Type of event (e.g., "extract", "index_props")
            data: Event data dictionary
            level: Log level
        """
        if not self._should_log(level):
            return

        event = {
            "timestamp": _timestamp(),
            "level": level.value,
            "type": event_type,
            "data": data,
        }
        with self.json_log.open("a", encoding="utf-8") as f:
            f.write(json.dumps(event, default=str) + "\n")

    def log_run(self, tool: str, inputs: Dict[str, Any], outputs: Optional[Dict[str, Any]] = None,
                returncode: int = 0, duration_ms: Optional[float] = None):
        """
        Log one tool invocation to both text and JSONL logs.

        Args:
            tool: Tool name (CLI subcommand)
            inputs: Arguments of the run
            outputs: Produced files or counts
            returncode: Exit code
            duration_ms: Execution duration in milliseconds
        """
        summary = f"TOOL={tool} RC={returncode}"
        if duration_ms is not None:
            summary += f" DURATION={duration_ms:.1f}ms"

        level = LogLevel.ERROR if returncode != 0 else LogLevel.INFO
        self.log_text(summary, level)

        data: Dict[str, Any] = {"inputs": inputs, "returncode": returncode}
        if outputs:
            data["outputs"] = outputs
        if duration_ms is not None:
            data["duration_ms"] = duration_ms
        self.log_jsonl(tool, data, level)
