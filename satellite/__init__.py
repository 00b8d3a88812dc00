"""Satellite allocation tracker."""

__version__ = "1.0.0"
