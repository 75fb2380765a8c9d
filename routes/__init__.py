"""
Route helpers.

Exports:
- get_container(): typed access to app.container
"""

from __future__ import annotations

from flask import current_app

from app.container import Container


def get_container() -> Container:
    c = getattr(current_app, "container", None)
    if c is None:
        raise RuntimeError("Container not initialized on app")
    return c
