"""Core lookup logic for the disc catalog."""

from .resolver import MetadataResolver

__all__ = ["MetadataResolver"]
