"""TripLedger - group expense settlement engine for shared trips."""

__version__ = "1.0.0"
