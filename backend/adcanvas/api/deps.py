"""Shared FastAPI dependencies."""

from fastapi import Request

from adcanvas.registry import Registry


def get_registry(request: Request) -> Registry:
    """The registry built at start-up by the application lifespan."""
    return request.app.state.registry
