"""Multi-strategy orchestration over a CLI-backed model runner."""

__version__ = "0.1.0"
