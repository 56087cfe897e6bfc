"""Backends for the Hopkins statistic."""

from pytendency.hopkins.backends.cpu import CPUHopkinsBackend

__all__ = ["CPUHopkinsBackend"]
