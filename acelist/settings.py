"""Process-wide defaults loaded from the environment (and an optional ``.env``)."""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

load_dotenv()

DEFAULT_M3U_URL = (
    "https://ipfs.io/ipns/k2k4r8oqlcjxsritt5mczkcn4mmvcmymbqw7113fz2flkrerfwfps004/data/listas/lista_iptv.m3u"
)
DEFAULT_LOGO = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/1/11/"
    "Blue_question_mark_icon.svg/1024px-Blue_question_mark_icon.svg.png"
)
DEFAULT_GROUP = "uncategorized"
LOOPBACK_ADDRESS = "127.0.0.1"
CACHE_TTL_SECONDS = 36000


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _env_int(name: str) -> int | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class Settings(BaseModel):
    """Resolved runtime settings shared by the CLI and the add-on server."""

    model_config = ConfigDict(frozen=True)

    m3u_url: str = DEFAULT_M3U_URL
    target_ip: Optional[str] = None
    default_logo: str = DEFAULT_LOGO
    http_timeout: float = 30.0
    host: str = "0.0.0.0"
    port: int = 7000
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Builds :class:`Settings` from environment variables, keeping defaults for unset ones."""

    values = {
        "m3u_url": _env_str("M3U_URL"),
        "target_ip": _env_str("TARGET_IP"),
        "default_logo": _env_str("DEFAULT_LOGO"),
        "http_timeout": _env_float("HTTP_TIMEOUT"),
        "host": _env_str("HOST"),
        "port": _env_int("PORT"),
        "log_level": _env_str("LOG_LEVEL"),
    }
    return Settings(**{key: value for key, value in values.items() if value is not None})
