import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from vintage_admin.console.client import AdminApiClient
from vintage_admin.console.errors import ApiError, ReadOnlyFlagError, TransientNetworkError
from vintage_admin.console.views import ViewCache
from vintage_admin.core.normalization import ARTIST, PLAYLIST, SONG

logger = logging.getLogger(__name__)


@dataclass
class Result:
    ok: bool
    entity_type: str
    entity_id: Any
    featured: bool
    record: Optional[Dict[str, Any]] = None
    error: Optional[Exception] = None


class FeaturedFlagCoordinator:
    """
    Toggles the featured flag with an optimistic local update.

    Every cached view holding the entity shows the new value right away.
    The API call is made once; if it fails every view goes back to the
    snapshot taken before the change. On success the featured, list and
    detail views of the entity are dropped so they are re-fetched.
    """

    def __init__(
        self,
        client: AdminApiClient,
        views: ViewCache,
        writable: Iterable[str] = (SONG, PLAYLIST, ARTIST),
    ):
        self.client = client
        self.views = views
        self.writable = frozenset(writable)

    @classmethod
    def for_curation(cls, client: AdminApiClient, views: ViewCache) -> "FeaturedFlagCoordinator":
        # The curation screen only shows artists; their flag lives on the artist editor
        return cls(client, views, writable=(SONG, PLAYLIST))

    async def set_featured(self, entity_type: str, entity_id: Any, desired: bool) -> Result:
        if entity_type not in self.writable:
            error = ReadOnlyFlagError(f"The featured flag of {entity_type} {entity_id} is read-only here")
            logger.warning(str(error))
            return Result(ok=False, entity_type=entity_type, entity_id=entity_id, featured=desired, error=error)

        snapshot = self.views.snapshot(self.views.views_holding(entity_type, entity_id))
        self.views.apply(entity_type, entity_id, {"featured": desired})

        try:
            record = await self.client.set_featured(entity_type, entity_id, desired)
        except (ApiError, TransientNetworkError) as e:
            self.views.restore(snapshot)
            logger.warning(f"Featured update of {entity_type} {entity_id} failed, reverted: {e}")
            return Result(ok=False, entity_type=entity_type, entity_id=entity_id, featured=desired, error=e)
        except Exception:
            self.views.restore(snapshot)
            raise

        self.views.invalidate_featured(entity_type)
        self.views.invalidate_lists(entity_type)
        self.views.invalidate_detail(entity_type, entity_id)
        logger.info(f"{entity_type} {entity_id} featured={desired}")
        return Result(ok=True, entity_type=entity_type, entity_id=entity_id, featured=desired, record=record)
