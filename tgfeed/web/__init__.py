"""
Web module for tgfeed.

This module exposes channel feeds over HTTP.
"""
from tgfeed.web.app import create_app

__all__ = ["create_app"]
