"""Artifact Bot: generate, validate and self-heal test and documentation artifacts."""

__version__ = "0.1.0"
