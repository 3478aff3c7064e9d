"""Validate lead submissions and forward them to TeleLead."""

__version__ = "1.0.0"
