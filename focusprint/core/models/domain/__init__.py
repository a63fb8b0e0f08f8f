"""Domain-level enums shared across the platform."""

from .enums import *  # noqa: F401,F403
