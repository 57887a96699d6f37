"""Web API for dependency analysis."""

from wiregraph.web.app import create_app

__all__ = ["create_app"]
