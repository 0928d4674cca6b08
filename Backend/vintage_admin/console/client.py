import logging
import re
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx

from vintage_admin.console.credentials import CredentialStore, Credentials, get_credential_store
from vintage_admin.console.errors import (
    ApiError,
    ConflictError,
    NotFoundError,
    TransientNetworkError,
    UnauthorizedError,
)
from vintage_admin.core.bulk import BulkReport, run_bulk
from vintage_admin.core.normalization import ARTIST, GENRE, PLAYLIST, SONG, USER, normalize
from vintage_admin.schemas.common import Page
from vintage_admin.core.config import settings
from vintage_admin.core.exceptions import NameLoadError
from vintage_admin.core.identity import IdentityResolver, NameLoader

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"

RESOURCES: Dict[str, str] = {
    "artists": ARTIST,
    "songs": SONG,
    "playlists": PLAYLIST,
    "users": USER,
    "genres": GENRE,
}

# Where each entity type's featured flag is written
_FEATURED_PATHS = {
    SONG: "/featured/songs/{id}",
    PLAYLIST: "/featured/playlists/{id}",
    ARTIST: "/artists/{id}/featured",
}

_API_SUFFIX = re.compile(r"/api$", re.IGNORECASE)


def normalize_api_base_url(url: Optional[str]) -> str:
    """'http://host', 'http://host/' and 'http://host/api' all become 'http://host/api'."""
    raw = (url or "").strip() or DEFAULT_API_URL
    trimmed = raw.rstrip("/")
    if _API_SUFFIX.search(trimmed):
        return trimmed
    return f"{trimmed}/api"


def _error_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        detail = payload.get("detail", payload.get("error"))
        if isinstance(detail, dict):
            return str(detail.get("message", detail))
        if detail is not None:
            return str(detail)
    return fallback


class AdminApiClient:
    """
    Async client for the admin REST API.

    Every call carries the bearer token from the shared credential store.
    A 401 clears that store before UnauthorizedError is raised, so the next
    screen sends the operator back to login.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        credentials: Optional[CredentialStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = normalize_api_base_url(base_url or settings.API_URL)
        self.credentials = credentials or get_credential_store()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AdminApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = {}
        token = self.credentials.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug(f"AdminApiClient: {method} {path}")
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Request error to admin API ({method} {path}): {e}")
            raise TransientNetworkError(f"Failed to reach admin API: {e}") from e

        if response.status_code == 204 or (response.is_success and not response.content):
            return None

        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        if response.is_success:
            return payload

        message = _error_message(payload, f"Admin API error: {response.status_code}")
        logger.warning(f"Admin API returned {response.status_code} for {method} {path}: {message}")
        if response.status_code == 401:
            self.credentials.clear()
            raise UnauthorizedError(message, response.status_code, payload)
        if response.status_code == 404:
            raise NotFoundError(message, response.status_code, payload)
        if response.status_code == 409:
            raise ConflictError(message, response.status_code, payload)
        raise ApiError(message, response.status_code, payload)

    # Auth

    async def login(self, email: str, password: str) -> Credentials:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self.credentials.set(data["accessToken"], data.get("expiresIn"), email=email)

    def logout(self) -> None:
        self.credentials.clear()

    # Generic CRUD

    def _entity_type(self, resource: str) -> str:
        try:
            return RESOURCES[resource]
        except KeyError:
            raise ValueError(f"Unknown resource: {resource}")

    async def list_page(self, resource: str, page: int = 1, page_size: int = 20, **filters) -> Page:
        entity_type = self._entity_type(resource)
        params = {"page": page, "pageSize": page_size}
        params.update({key: value for key, value in filters.items() if value is not None})
        data = await self._request("GET", f"/{resource}", params=params)
        items = [normalize(item, entity_type) for item in data.get("items", [])]
        return Page[dict](items=items, total=data.get("total", len(items)))

    async def get(self, resource: str, entity_id: Any) -> Dict[str, Any]:
        data = await self._request("GET", f"/{resource}/{entity_id}")
        return normalize(data, self._entity_type(resource))

    async def create(self, resource: str, data: Dict[str, Any]) -> Dict[str, Any]:
        entity_type = self._entity_type(resource)
        created = await self._request("POST", f"/{resource}", json=_jsonable(normalize(data, entity_type)))
        return normalize(created, entity_type)

    async def update(self, resource: str, entity_id: Any, changes: Dict[str, Any]) -> Dict[str, Any]:
        entity_type = self._entity_type(resource)
        body = _jsonable(normalize(changes, entity_type, partial=True))
        updated = await self._request("PATCH", f"/{resource}/{entity_id}", json=body)
        return normalize(updated, entity_type)

    async def delete(self, resource: str, entity_id: Any) -> None:
        await self._request("DELETE", f"/{resource}/{entity_id}")

    async def bulk_delete(self, resource: str, entity_ids: List[Any]) -> BulkReport:
        """Delete each id on its own; one refusal does not stop the others."""
        return await run_bulk(
            entity_ids,
            lambda entity_id: self.delete(resource, entity_id),
            expected=(ApiError, TransientNetworkError),
        )

    # Featured

    async def set_featured(self, entity_type: str, entity_id: Any, featured: bool) -> Dict[str, Any]:
        try:
            path = _FEATURED_PATHS[entity_type].format(id=entity_id)
        except KeyError:
            raise ValueError(f"{entity_type} has no featured flag")
        data = await self._request("PATCH", path, json={"featured": featured})
        return normalize(data, entity_type)

    async def get_featured(self, entity_type: str, limit: int = 10) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/featured/{entity_type}s", params={"limit": limit})
        return [normalize(item, entity_type) for item in data]

    # Identity checks

    async def check_artist_name(self, name: str, exclude_id: Any = None) -> Dict[str, Any]:
        params = {"name": name}
        if exclude_id is not None:
            params["excludeId"] = str(exclude_id)
        return await self._request("GET", "/artists/check-name", params=params)

    def artist_name_loader(self, page_size: int = 100) -> NameLoader:
        """
        Loader of (id, stageName) pairs for an IdentityResolver, read page by page.

        API errors other than 401 surface as NameLoadError, so the duplicate
        check lets creation through instead of blocking it.
        """
        async def load():
            names = []
            page = 1
            while True:
                try:
                    result = await self.list_page("artists", page=page, page_size=page_size)
                except UnauthorizedError:
                    raise
                except ApiError as e:
                    raise NameLoadError(f"{e} (HTTP {e.status_code})") from e
                names.extend((item.get("id"), item.get("stageName")) for item in result.items)
                if not result.items or len(names) >= result.total:
                    return names
                page += 1
        return load

    def artist_resolver(self) -> IdentityResolver:
        return IdentityResolver(self.artist_name_loader(), label="artist name")


def _jsonable(record: Dict[str, Any]) -> Dict[str, Any]:
    return {key: str(value) if isinstance(value, UUID) else value for key, value in record.items()}
