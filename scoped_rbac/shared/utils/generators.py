"""Identifier generation for persisted entities."""

from cuid2 import cuid_wrapper

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Collision-resistant id used as the primary key of every model"""
    return str(_cuid())
