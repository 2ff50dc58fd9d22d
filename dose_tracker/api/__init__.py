"""HTTP API for the dose tracker."""

from .app import create_app

__all__ = ["create_app"]
