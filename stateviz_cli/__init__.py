"""
StateViz CLI - Command line tools and the viewer server

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from .cli import main

__all__ = ["main"]
