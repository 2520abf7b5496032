"""Configuration model for the disc catalog."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from ..exceptions import ConfigurationError

APP_NAME = "DiscCatalog"
APP_VERSION = "1.0.0"

STORE_BACKENDS = ("memory", "json", "firestore")

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "lookup": {
            "type": "object",
            "properties": {
                "contact_email": {"type": "string"},
                "musicbrainz_url": {"type": "string", "minLength": 1},
                "cover_art_url": {"type": "string", "minLength": 1},
                "upcitemdb_url": {"type": "string", "minLength": 1},
                "omdb_url": {"type": "string", "minLength": 1},
                "omdb_api_key": {"type": "string"},
                "request_delay": {"type": "number", "minimum": 0},
                "cover_art_delay": {"type": "number", "minimum": 0},
                "timeout": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
        "store": {
            "type": "object",
            "properties": {
                "backend": {"type": "string", "enum": list(STORE_BACKENDS)},
                "data_dir": {"type": "string", "minLength": 1},
                "project_id": {"type": "string"},
                "api_key": {"type": "string"},
                "database": {"type": "string", "minLength": 1},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "DISC_CATALOG_CONTACT_EMAIL": ("lookup", "contact_email"),
    "DISC_CATALOG_OMDB_API_KEY": ("lookup", "omdb_api_key"),
    "DISC_CATALOG_FIRESTORE_PROJECT": ("store", "project_id"),
    "DISC_CATALOG_FIRESTORE_API_KEY": ("store", "api_key"),
}


@dataclass
class LookupConfig:
    """Configuration for the external catalogs used by the resolver."""
    contact_email: str = ""
    musicbrainz_url: str = "https://musicbrainz.org/ws/2"
    cover_art_url: str = "https://coverartarchive.org"
    upcitemdb_url: str = "https://api.upcitemdb.com"
    omdb_url: str = "https://www.omdbapi.com"
    omdb_api_key: str = ""
    request_delay: float = 1.0  # seconds between catalog requests
    cover_art_delay: float = 0.5
    timeout: float = 10

    @property
    def user_agent(self) -> str:
        """Descriptive client string sent with every outbound request."""
        if self.contact_email:
            return f"{APP_NAME}/{APP_VERSION} ({self.contact_email})"
        return f"{APP_NAME}/{APP_VERSION}"


@dataclass
class StoreConfig:
    """Configuration for the catalog store."""
    backend: str = "json"
    data_dir: str = "~/.disc-catalog"
    project_id: str = ""
    api_key: str = ""
    database: str = "(default)"

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()


@dataclass
class Config:
    """Main configuration model."""
    lookup: LookupConfig = field(default_factory=LookupConfig)
    store: StoreConfig = field(default_factory=StoreConfig)

    @classmethod
    def default(cls) -> "Config":
        return apply_environment(cls())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lookup": dict(self.lookup.__dict__),
            "store": dict(self.store.__dict__),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        return cls(
            lookup=LookupConfig(**data.get("lookup", {})),
            store=StoreConfig(**data.get("store", {})),
        )


def validate_config_data(data: Any) -> None:
    """Validate raw configuration data against CONFIG_SCHEMA.

    Raises:
        ConfigurationError: If the data does not match the schema.
    """
    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        location = "/".join(str(part) for part in e.absolute_path) or "<root>"
        raise ConfigurationError(f"Invalid configuration at {location}: {e.message}")


def apply_environment(config: Config, environ: Optional[Dict[str, str]] = None) -> Config:
    """Override configuration values from DISC_CATALOG_* environment variables."""
    environ = os.environ if environ is None else environ
    for variable, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if value:
            setattr(getattr(config, section), key, value)
    return config


def load_config(config_path: Path, environ: Optional[Dict[str, str]] = None) -> Config:
    """Load configuration from a JSON file, then apply environment overrides."""
    try:
        with open(config_path, 'r') as f:
            config_data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file {config_path} is not valid JSON: {e}")

    validate_config_data(config_data)
    return apply_environment(Config.from_dict(config_data), environ)


def save_config(config: Config, config_path: Path) -> None:
    """Save configuration to a JSON file."""
    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    save_config(Config(), config_path)
