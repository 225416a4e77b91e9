"""
Configuration: poll cadences and the CLI's saved credentials.

Credentials live in ~/.pairchat/config.json; PAIRCHAT_BASE_URL and
PAIRCHAT_TOKEN override the saved values.
"""

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "http://localhost:5000"
CONFIG_FILE = Path.home() / ".pairchat" / "config.json"

DEFAULT_ACTIVATION_INTERVAL_S = 3.0
DEFAULT_MESSAGE_INTERVAL_S = 5.0
DEFAULT_NOTICE_TTL_S = 5.0
DEFAULT_SESSIONS_CACHE_TTL_S = 2.0


class ChatConfig(BaseModel):
    activation_interval: float = Field(default=DEFAULT_ACTIVATION_INTERVAL_S, gt=0)
    message_interval: float = Field(default=DEFAULT_MESSAGE_INTERVAL_S, gt=0)
    notice_ttl: float = Field(default=DEFAULT_NOTICE_TTL_S, gt=0)
    sessions_cache_ttl: float = Field(default=DEFAULT_SESSIONS_CACHE_TTL_S, ge=0)

    model_config = {"frozen": True}


def load_config(path: Path = CONFIG_FILE) -> dict[str, Any]:
    try:
        cfg = json.loads(path.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        cfg = {}
    if os.environ.get("PAIRCHAT_BASE_URL"):
        cfg["base_url"] = os.environ["PAIRCHAT_BASE_URL"]
    if os.environ.get("PAIRCHAT_TOKEN"):
        cfg["access_token"] = os.environ["PAIRCHAT_TOKEN"]
    return cfg


def save_config(cfg: dict[str, Any], path: Path = CONFIG_FILE) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))
