"""Live-wire (Intelligent Scissors) boundary tracing service."""

__version__ = "0.1.0"
