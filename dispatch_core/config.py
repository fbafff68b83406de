from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_REALLOCATION_PATH = "reallocation"
DEFAULT_DISPATCH_PATH = "Dispatch"
DEFAULT_SCHEDULE_PATH = "schedule"
DEFAULT_FETCH_TIMEOUT = 15.0
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class FirebaseSettings:
    database_url: str = ""
    auth_token: Optional[str] = None
    reallocation_path: str = DEFAULT_REALLOCATION_PATH
    dispatch_path: str = DEFAULT_DISPATCH_PATH
    schedule_path: str = DEFAULT_SCHEDULE_PATH
    timeout: float = DEFAULT_FETCH_TIMEOUT


def _as_float(value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        out = float(value)
    except Exception:
        return default
    return out if out > 0 else default


def load_settings(environ: Optional[Mapping[str, str]] = None) -> FirebaseSettings:
    env = os.environ if environ is None else environ
    return FirebaseSettings(
        database_url=(env.get("DISPATCH_FIREBASE_URL") or "").strip().rstrip("/"),
        auth_token=(env.get("DISPATCH_FIREBASE_AUTH") or "").strip() or None,
        reallocation_path=(env.get("DISPATCH_REALLOCATION_PATH") or DEFAULT_REALLOCATION_PATH).strip("/"),
        dispatch_path=(env.get("DISPATCH_DISPATCH_PATH") or DEFAULT_DISPATCH_PATH).strip("/"),
        schedule_path=(env.get("DISPATCH_SCHEDULE_PATH") or DEFAULT_SCHEDULE_PATH).strip("/"),
        timeout=_as_float(env.get("DISPATCH_FETCH_TIMEOUT"), DEFAULT_FETCH_TIMEOUT),
    )


def configure_logging(environ: Optional[Mapping[str, str]] = None) -> None:
    env = os.environ if environ is None else environ
    level_name = (env.get("DISPATCH_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
