"""Configuration for netkit."""

from .settings import Settings

__all__ = ["Settings"]
