"""Banker's algorithm simulation: node bookkeeping, priority aging, deadlock prediction and TCP messaging between nodes."""

__version__ = "0.1.0"
__all__ = ["banker", "scheduler", "distributed", "simulation"]