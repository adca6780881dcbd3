"""Educational IoT topology sandbox: circuit validation and simulation engine."""

__version__ = "0.1.0"
