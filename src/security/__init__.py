"""Security module — bearer-token actor resolution."""

from src.security.auth import Actor, get_optional_actor

__all__ = ["Actor", "get_optional_actor"]
