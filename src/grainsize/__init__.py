"""Grain size analysis of soil samples from sieve and hydrometer tests."""

__version__ = "0.1.0"
