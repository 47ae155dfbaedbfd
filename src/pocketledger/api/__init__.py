"""HTTP JSON API for pocketledger."""

from pocketledger.api.app import create_app

__all__ = ["create_app"]
