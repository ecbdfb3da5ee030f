"""Outline, key lookup and scoped property reads for pipeline YAML files."""

__version__ = "0.1.0"
