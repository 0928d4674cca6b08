"""Tests for optimistic featured toggling and rollback in the console."""

import httpx
import pytest

from vintage_admin.console.client import AdminApiClient
from vintage_admin.console.credentials import CredentialStore
from vintage_admin.console.errors import ApiError, ReadOnlyFlagError
from vintage_admin.console.featured import FeaturedFlagCoordinator
from vintage_admin.console.views import ViewCache, detail_key, featured_key, list_key


class FakeClient:
    """Records calls; answers with `response` or raises `error`."""

    def __init__(self, response=None, error: Exception = None):
        self.response = response
        self.error = error
        self.calls = []
        self.observe = None

    async def set_featured(self, entity_type, entity_id, featured):
        self.calls.append((entity_type, entity_id, featured))
        if self.observe:
            self.observe()
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def views() -> ViewCache:
    cache = ViewCache()
    cache.put(list_key("song", "page=1"), [{"id": "s1", "featured": False}, {"id": "s2", "featured": False}])
    cache.put(detail_key("song", "s1"), {"id": "s1", "featured": False, "title": "Blue"})
    cache.put(featured_key("song"), [{"id": "s9", "featured": True}])
    cache.put(list_key("playlist", "page=1"), [{"id": "s1", "featured": False}])
    return cache


class TestFeaturedFlagCoordinator:
    async def test_success_applies_and_invalidates(self, views: ViewCache) -> None:
        """Test that a confirmed update drops the affected views for refetching."""
        client = FakeClient(response={"id": "s1", "featured": True})
        seen = {}
        client.observe = lambda: seen.update(views.get(detail_key("song", "s1")))

        result = await FeaturedFlagCoordinator(client, views).set_featured("song", "s1", True)

        assert result.ok
        assert result.record == {"id": "s1", "featured": True}
        # Optimistic value was visible while the request was in flight
        assert seen["featured"] is True
        assert client.calls == [("song", "s1", True)]
        assert list_key("song", "page=1") not in views
        assert featured_key("song") not in views
        assert detail_key("song", "s1") not in views
        # Views of other entity types are untouched
        assert views.get(list_key("playlist", "page=1")) == [{"id": "s1", "featured": False}]

    async def test_api_error_restores_every_view(self, views: ViewCache) -> None:
        """Test that a failed update puts all views back as they were."""
        before = views.snapshot(views.keys())
        client = FakeClient(error=ApiError("Only published songs can be featured", 422))

        result = await FeaturedFlagCoordinator(client, views).set_featured("song", "s1", True)

        assert not result.ok
        assert isinstance(result.error, ApiError)
        assert {key: views.get(key) for key in views.keys()} == before
        assert len(client.calls) == 1

    async def test_unexpected_error_restores_and_propagates(self, views: ViewCache) -> None:
        client = FakeClient(error=RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await FeaturedFlagCoordinator(client, views).set_featured("song", "s1", True)

        assert views.get(detail_key("song", "s1"))["featured"] is False

    async def test_curation_refuses_artists(self, views: ViewCache) -> None:
        """Test that the curation screen cannot change an artist's flag."""
        client = FakeClient(response={})
        result = await FeaturedFlagCoordinator.for_curation(client, views).set_featured("artist", "a1", True)

        assert not result.ok
        assert isinstance(result.error, ReadOnlyFlagError)
        assert client.calls == []

    async def test_repeated_toggle_is_stable(self, views: ViewCache) -> None:
        """Test that setting the same value twice ends in the same state."""
        client = FakeClient(response={"id": "s1", "featured": True})
        coordinator = FeaturedFlagCoordinator(client, views)

        first = await coordinator.set_featured("song", "s1", True)
        second = await coordinator.set_featured("song", "s1", True)

        assert first.ok and second.ok
        assert first.record == second.record

    async def test_with_real_client_over_mock_transport(self, views: ViewCache) -> None:
        """Test the full path through AdminApiClient, including a 409 rollback."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(409, json={"detail": "conflict"})

        client = AdminApiClient("http://admin.test", CredentialStore(), transport=httpx.MockTransport(handler))
        async with client:
            result = await FeaturedFlagCoordinator(client, views).set_featured("song", "s2", True)

        assert not result.ok
        assert result.error.status_code == 409
        assert views.get(list_key("song", "page=1"))[1] == {"id": "s2", "featured": False}
