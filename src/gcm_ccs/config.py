"""
Connection parameters and persisted settings.

Settings live in ``~/.gcm-ccs/config.json``. Credentials can also come from
the ``GCM_CCS_PROJECT_ID``, ``GCM_CCS_API_KEY`` and ``GCM_CCS_DEVICE_TOKEN``
environment variables, which take precedence over the file.
"""

import json
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

GCM_SERVER = "gcm.googleapis.com"
GCM_PORT = 5235
GCM_PREPROD_PORT = 5236

CONFIG_FILE = Path.home() / ".gcm-ccs" / "config.json"

ENV_OVERRIDES = {
    "GCM_CCS_PROJECT_ID": "project_id",
    "GCM_CCS_API_KEY": "api_key",
    "GCM_CCS_DEVICE_TOKEN": "device_token",
}


class ConnectionConfig(BaseModel):
    """What a stanza channel needs to open a CCS stream.

    TLS is negotiated by the socket itself (``use_tls_socket``), so stream
    level security negotiation stays disabled.
    """

    host: str = GCM_SERVER
    port: int = Field(default=GCM_PORT, gt=0, lt=65536)
    domain: str = GCM_SERVER
    connect_timeout: float = Field(default=30.0, gt=0)
    security_mode: Literal["disabled", "required", "ifpossible"] = "disabled"
    use_tls_socket: bool = True
    compression: bool = False
    send_presence: bool = False
    load_roster: bool = False

    def identity(self, sender_id: str) -> str:
        return f"{sender_id}@{self.domain}"


class CcsSettings(BaseModel):
    project_id: str = ""
    api_key: str = ""
    device_token: Optional[str] = None
    host: str = GCM_SERVER
    port: int = Field(default=GCM_PORT, gt=0, lt=65536)
    domain: str = GCM_SERVER
    connect_timeout: float = Field(default=30.0, gt=0)

    def connection_config(self) -> ConnectionConfig:
        return ConnectionConfig(
            host=self.host,
            port=self.port,
            domain=self.domain,
            connect_timeout=self.connect_timeout,
        )


def load_settings(path: Optional[Path] = None) -> CcsSettings:
    """Load settings, falling back to defaults when the file is missing or broken."""
    path = path or CONFIG_FILE
    data: dict = {}
    try:
        loaded = json.loads(path.read_text())
        if isinstance(loaded, dict):
            data = loaded
        else:
            logger.warning("Ignoring settings in %s: expected a JSON object", path)
    except FileNotFoundError:
        pass
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read settings from %s: %s", path, e)

    for env_name, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            data[field] = value

    try:
        return CcsSettings.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid settings in %s, using defaults: %s", path, e)
        return CcsSettings()


def save_settings(settings: CcsSettings, path: Optional[Path] = None) -> Path:
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.model_dump(), indent=2))
    return path
