"""HTTP surface of fx_bnr."""

from fx_bnr.api.app import create_app

__all__ = ["create_app"]
