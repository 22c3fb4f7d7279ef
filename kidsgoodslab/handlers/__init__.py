"""Serverless HTTP handlers for the site's API endpoints."""

from . import contact, debug

__all__ = ["contact", "debug"]
