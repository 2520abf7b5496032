"""Configuration models for the disc catalog."""

from .config import Config, LookupConfig, StoreConfig, load_config

__all__ = ["Config", "LookupConfig", "StoreConfig", "load_config"]
