"""
StateViz Unified Configuration System
=====================================

Loads and manages configuration from stateviz.yaml with environment variable overrides.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import os
import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "stateviz.yaml"


# =============================================================================
# Configuration Data Classes
# =============================================================================

@dataclass
class LayoutConfig:
    """Radial layout and simulation parameters."""
    ring_spacing: float = 180.0
    strength: float = 0.25
    width: float = 1280.0
    height: float = 800.0
    cooldown_ticks: int = 10
    velocity_decay: float = 0.4
    alpha_min: float = 0.001


@dataclass
class ViewerConfig:
    """Browser viewer and server configuration."""
    host: str = "127.0.0.1"
    port: int = 8080
    background: str = "#131017"
    node_rel_size: int = 40
    particle_interval_ms: int = 1000
    default_machine: Optional[str] = None


@dataclass
class ExtractConfig:
    """Inheritance extraction configuration."""
    extensions: List[str] = field(default_factory=lambda: [".swift"])


@dataclass
class LogIndexConfig:
    """Log attribute indexer configuration."""
    prefix: str = "playerStateMachine"


@dataclass
class DataConfig:
    """Locations of machine descriptors and inspector properties."""
    machines_path: Optional[str] = None
    properties_path: Optional[str] = None
    machine_aliases: Dict[str, str] = field(default_factory=dict)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_dir: str = ".stateviz_logs"
    events_log: str = "events.jsonl"


@dataclass
class StateVizConfig:
    """Root configuration container."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    viewer: ViewerConfig = field(default_factory=ViewerConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    log_index: LogIndexConfig = field(default_factory=LogIndexConfig)
    data: DataConfig = field(default_factory=DataConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loader
# =============================================================================

def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find stateviz.yaml by searching upward from start_path.

    Search order:
    1. start_path / stateviz.yaml
    2. start_path / .stateviz / stateviz.yaml
    3. Parent directories (recursive)
    4. ~/.config/stateviz/stateviz.yaml

    Args:
        start_path: Starting directory (defaults to cwd)

    Returns:
        Path to config file or None if not found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = Path(start_path).resolve()
    for _ in range(10):  # Max 10 levels up
        for candidate in (current / CONFIG_FILENAME, current / ".stateviz" / CONFIG_FILENAME):
            if candidate.exists():
                return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    user_config = Path.home() / ".config" / "stateviz" / CONFIG_FILENAME
    if user_config.exists():
        return user_config

    return None


def load_config(config_path: Optional[Path] = None) -> StateVizConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Environment variables override config file values:
    - STATEVIZ_RING_SPACING -> layout.ring_spacing
    - STATEVIZ_VIEWER_PORT -> viewer.port
    - STATEVIZ_MACHINES -> data.machines_path
    - STATEVIZ_PROPERTIES -> data.properties_path
    - STATEVIZ_LOG_LEVEL -> logging.level
    - STATEVIZ_LOG_PREFIX -> log_index.prefix

    Args:
        config_path: Path to config file (auto-detected if None)

    Returns:
        StateVizConfig instance
    """
    config = StateVizConfig()

    if config_path is None:
        config_path = find_config_file()

    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, 'r', encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            config = _parse_config_dict(data)
        except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
    else:
        logger.info("No config file found, using defaults")

    config = _apply_env_overrides(config)
    _validate_config(config)
    return config


def _parse_config_dict(data: Dict[str, Any]) -> StateVizConfig:
    """Parse configuration dictionary into StateVizConfig."""
    config = StateVizConfig()

    if "layout" in data:
        lay = data["layout"]
        config.layout = LayoutConfig(
            ring_spacing=lay.get("ring_spacing", config.layout.ring_spacing),
            strength=lay.get("strength", config.layout.strength),
            width=lay.get("width", config.layout.width),
            height=lay.get("height", config.layout.height),
            cooldown_ticks=lay.get("cooldown_ticks", config.layout.cooldown_ticks),
            velocity_decay=lay.get("velocity_decay", config.layout.velocity_decay),
            alpha_min=lay.get("alpha_min", config.layout.alpha_min),
        )

    if "viewer" in data:
        view = data["viewer"]
        config.viewer = ViewerConfig(
            host=view.get("host", config.viewer.host),
            port=view.get("port", config.viewer.port),
            background=view.get("background", config.viewer.background),
            node_rel_size=view.get("node_rel_size", config.viewer.node_rel_size),
            particle_interval_ms=view.get("particle_interval_ms", config.viewer.particle_interval_ms),
            default_machine=view.get("default_machine"),
        )

    if "extract" in data:
        config.extract = ExtractConfig(
            extensions=data["extract"].get("extensions", config.extract.extensions),
        )

    if "log_index" in data:
        config.log_index = LogIndexConfig(
            prefix=data["log_index"].get("prefix", config.log_index.prefix),
        )

    if "data" in data:
        dat = data["data"]
        config.data = DataConfig(
            machines_path=dat.get("machines_path"),
            properties_path=dat.get("properties_path"),
            machine_aliases=dat.get("machine_aliases") or {},
        )

    if "logging" in data:
        log = data["logging"]
        config.logging = LoggingConfig(
            level=log.get("level", config.logging.level),
            log_dir=log.get("log_dir", config.logging.log_dir),
            events_log=log.get("events_log", config.logging.events_log),
        )

    return config


def _apply_env_overrides(config: StateVizConfig) -> StateVizConfig:
    """Apply environment variable overrides to config."""

    if os.environ.get("STATEVIZ_RING_SPACING"):
        try:
            config.layout.ring_spacing = float(os.environ["STATEVIZ_RING_SPACING"])
        except ValueError:
            logger.warning(f"Ignoring STATEVIZ_RING_SPACING={os.environ['STATEVIZ_RING_SPACING']!r}")

    if os.environ.get("STATEVIZ_VIEWER_PORT"):
        try:
            config.viewer.port = int(os.environ["STATEVIZ_VIEWER_PORT"])
        except ValueError:
            logger.warning(f"Ignoring STATEVIZ_VIEWER_PORT={os.environ['STATEVIZ_VIEWER_PORT']!r}")

    if os.environ.get("STATEVIZ_MACHINES"):
        config.data.machines_path = os.environ["STATEVIZ_MACHINES"]

    if os.environ.get("STATEVIZ_PROPERTIES"):
        config.data.properties_path = os.environ["STATEVIZ_PROPERTIES"]

    if os.environ.get("STATEVIZ_LOG_LEVEL"):
        config.logging.level = os.environ["STATEVIZ_LOG_LEVEL"].upper()

    if os.environ.get("STATEVIZ_LOG_PREFIX"):
        config.log_index.prefix = os.environ["STATEVIZ_LOG_PREFIX"]

    return config


def _validate_config(config: StateVizConfig) -> None:
    """Validate configuration and log warnings."""
    defaults = LayoutConfig()

    if config.layout.ring_spacing <= 0:
        logger.warning(f"Invalid ring_spacing {config.layout.ring_spacing}, using {defaults.ring_spacing}")
        config.layout.ring_spacing = defaults.ring_spacing

    if not 0 < config.layout.velocity_decay < 1:
        logger.warning(f"Invalid velocity_decay {config.layout.velocity_decay}, using {defaults.velocity_decay}")
        config.layout.velocity_decay = defaults.velocity_decay

    if not 0 < config.layout.alpha_min < 1:
        logger.warning(f"Invalid alpha_min {config.layout.alpha_min}, using {defaults.alpha_min}")
        config.layout.alpha_min = defaults.alpha_min

    if config.layout.cooldown_ticks < 0:
        logger.warning(f"Invalid cooldown_ticks {config.layout.cooldown_ticks}, using {defaults.cooldown_ticks}")
        config.layout.cooldown_ticks = defaults.cooldown_ticks

    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR")
    if config.logging.level.upper() not in valid_levels:
        logger.warning(f"Unknown log level '{config.logging.level}', defaulting to 'INFO'")
        config.logging.level = "INFO"

    config.extract.extensions = [
        ext if ext.startswith(".") else f".{ext}" for ext in config.extract.extensions
    ]


def save_config(config: StateVizConfig, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: StateVizConfig instance
        path: Output path
    """
    data = {
        "layout": {
            "ring_spacing": config.layout.ring_spacing,
            "strength": config.layout.strength,
            "width": config.layout.width,
            "height": config.layout.height,
            "cooldown_ticks": config.layout.cooldown_ticks,
            "velocity_decay": config.layout.velocity_decay,
            "alpha_min": config.layout.alpha_min,
        },
        "viewer": {
            "host": config.viewer.host,
            "port": config.viewer.port,
            "background": config.viewer.background,
            "node_rel_size": config.viewer.node_rel_size,
            "particle_interval_ms": config.viewer.particle_interval_ms,
            "default_machine": config.viewer.default_machine,
        },
        "extract": {
            "extensions": config.extract.extensions,
        },
        "log_index": {
            "prefix": config.log_index.prefix,
        },
        "data": {
            "machines_path": config.data.machines_path,
            "properties_path": config.data.properties_path,
            "machine_aliases": config.data.machine_aliases,
        },
        "logging": {
            "level": config.logging.level,
            "log_dir": config.logging.log_dir,
            "events_log": config.logging.events_log,
        },
    }

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Configuration saved to: {path}")

