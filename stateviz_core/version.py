"""
StateViz Version Management - Centralized version for all components

This module provides a single source of truth for the StateViz version.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

# =============================================================================
# StateViz Version - Single Source of Truth
# =============================================================================

__version__ = "0.4.0"

BUILD_DATE = "2026-10-19"


def get_short_banner() -> str:
    """Get a compact version banner."""
    return f"StateViz v{__version__} | {BUILD_DATE}"
