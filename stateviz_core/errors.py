"""
StateViz exceptions

The graph model itself never raises on odd input (empty or partial graphs are
valid). These exceptions cover the loaders and the offline tooling.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""


class StateVizError(Exception):
    """Base class for StateViz errors."""


class DescriptorError(StateVizError):
    """A machine descriptor or property file is malformed."""


class MachineNotFoundError(StateVizError, KeyError):
    """Requested machine is not in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Machine not found: {name}")

    def __str__(self) -> str:
        return f"Machine not found: {self.name}"


class ExtractionError(StateVizError):
    """Input or output location for an offline tool is unusable."""
