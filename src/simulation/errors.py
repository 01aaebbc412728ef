"""
Exceptions raised by the simulation package.

All of them are precondition failures: they are raised before any numerical
work starts and no partial result accompanies them.
"""


class SimulationError(Exception):
    """Base class for every error raised by the simulation pipeline."""


class InsufficientDataError(SimulationError):
    """Raised when a price series is too short to produce a log return."""


class InvalidParameterError(SimulationError):
    """Raised when a simulation input is out of its valid range."""


class DataNotReadyError(SimulationError):
    """Raised when a simulation is requested before prices have been loaded."""


class PriceSourceError(SimulationError):
    """Raised when a price source cannot produce a price series."""
