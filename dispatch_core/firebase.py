"""Raw collection fetches from the Firebase Realtime Database REST interface.

Each fetch returns the decoded JSON body untouched (dict, list or None).
Any failure, whatever its cause, surfaces as a single `DataLoadError`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from dispatch_core.config import FirebaseSettings, load_settings


logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Raised when any raw collection cannot be fetched or decoded."""


@dataclass(frozen=True)
class RawCollections:
    reallocation: Any
    dispatch: Any
    schedule: Any


def collection_url(settings: FirebaseSettings, path: str) -> str:
    if not settings.database_url:
        raise DataLoadError("DISPATCH_FIREBASE_URL is not configured")
    return f"{settings.database_url}/{path.strip('/')}.json"


def _params(settings: FirebaseSettings) -> Dict[str, str]:
    return {"auth": settings.auth_token} if settings.auth_token else {}


async def fetch_collection(client: httpx.AsyncClient, settings: FirebaseSettings, path: str) -> Any:
    url = collection_url(settings, path)
    try:
        resp = await client.get(url, params=_params(settings), timeout=settings.timeout)
    except httpx.HTTPError as exc:
        raise DataLoadError(f"GET {path} failed: {exc}") from exc
    if not 200 <= resp.status_code < 300:
        raise DataLoadError(f"GET {path} returned HTTP {resp.status_code}: {resp.text[:300]}")
    try:
        data = resp.json()
    except ValueError as exc:
        raise DataLoadError(f"GET {path} returned a non-JSON body") from exc
    logger.debug("fetched %s (%s records)", path, len(data) if hasattr(data, "__len__") else 0)
    return data


async def fetch_reallocation_data(client: httpx.AsyncClient, settings: FirebaseSettings) -> Any:
    return await fetch_collection(client, settings, settings.reallocation_path)


async def fetch_dispatch_data(client: httpx.AsyncClient, settings: FirebaseSettings) -> Any:
    return await fetch_collection(client, settings, settings.dispatch_path)


async def fetch_schedule_data(client: httpx.AsyncClient, settings: FirebaseSettings) -> Any:
    return await fetch_collection(client, settings, settings.schedule_path)


async def fetch_all(
    settings: Optional[FirebaseSettings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RawCollections:
    """Fetch the three collections concurrently; all of them or none."""
    settings = settings or load_settings()
    async with httpx.AsyncClient(transport=transport) as client:
        results = await asyncio.gather(
            fetch_reallocation_data(client, settings),
            fetch_dispatch_data(client, settings),
            fetch_schedule_data(client, settings),
            return_exceptions=True,
        )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    reallocation, dispatch, schedule = results
    return RawCollections(reallocation=reallocation, dispatch=dispatch, schedule=schedule)
