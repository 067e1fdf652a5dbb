"""HTTP API version 1."""

from clientchain.api.v1.router import api_router

__all__ = ["api_router"]
