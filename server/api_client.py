"""
Client for a running Room Designer API: catalog snapshot and design persistence.
"""

import logging
from typing import List, Optional

import httpx

from config import API_URL, API_TIMEOUT
from models.design import DesignResponse, DesignUpdate
from models.furniture import FurnitureResponse

logger = logging.getLogger(__name__)


class APIClientError(Exception):
    """Request to the Room Designer API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _headers(user_id: Optional[str] = None, role: Optional[str] = None) -> dict:
    headers = {}
    if user_id:
        headers["X-User-Id"] = user_id
    if role:
        headers["X-User-Role"] = role
    return headers


async def _send(client: httpx.AsyncClient, method: str, path: str, **kwargs) -> httpx.Response:
    try:
        response = await client.request(method, path, **kwargs)
        response.raise_for_status()
    except httpx.TimeoutException:
        raise APIClientError(f"{method} {path} timed out (>{API_TIMEOUT}s)")
    except httpx.HTTPStatusError as e:
        raise APIClientError(f"{method} {path} failed: {e.response.status_code}", e.response.status_code)
    except httpx.RequestError as e:
        raise APIClientError(f"{method} {path} error: {str(e)}")
    return response


async def _request(method: str, path: str, client: Optional[httpx.AsyncClient] = None,
                   **kwargs) -> httpx.Response:
    if client is not None:
        return await _send(client, method, path, **kwargs)
    async with httpx.AsyncClient(base_url=API_URL, timeout=API_TIMEOUT) as own_client:
        return await _send(own_client, method, path, **kwargs)


async def list_catalog_entries(client: Optional[httpx.AsyncClient] = None) -> List[FurnitureResponse]:
    response = await _request("GET", "/api/furniture/", client=client)
    entries = [FurnitureResponse(**item) for item in response.json()]
    logger.info(f"Fetched {len(entries)} catalog entries")
    return entries


async def load_design(design_id: str, user_id: Optional[str] = None,
                      client: Optional[httpx.AsyncClient] = None) -> DesignResponse:
    if user_id:
        response = await _request("GET", f"/api/designs/{design_id}",
                                  client=client, headers=_headers(user_id))
    else:
        response = await _request("GET", f"/api/designs/public/{design_id}", client=client)
    return DesignResponse(**response.json())


async def save_design(design_id: str, update: DesignUpdate, user_id: str,
                      client: Optional[httpx.AsyncClient] = None) -> DesignResponse:
    response = await _request(
        "PUT", f"/api/designs/{design_id}",
        client=client,
        headers=_headers(user_id),
        json=update.model_dump(mode="json", exclude_none=True),
    )
    logger.info(f"Saved design {design_id} ({len(update.furniture or [])} pieces)")
    return DesignResponse(**response.json())
