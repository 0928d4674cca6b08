import copy
import logging
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

LIST = "list"
FEATURED = "featured"
DETAIL = "detail"


class ViewKey(NamedTuple):
    kind: str
    entity_type: str
    qualifier: Optional[str] = None


def list_key(entity_type: str, qualifier: str = "") -> ViewKey:
    return ViewKey(LIST, entity_type, qualifier)


def featured_key(entity_type: str) -> ViewKey:
    return ViewKey(FEATURED, entity_type)


def detail_key(entity_type: str, entity_id: Any) -> ViewKey:
    return ViewKey(DETAIL, entity_type, str(entity_id))


def _records(value: Any) -> Iterator[Dict[str, Any]]:
    # A view is a single record, a list of records or a Page of them
    if isinstance(value, dict):
        yield value
    elif isinstance(value, list):
        yield from (item for item in value if isinstance(item, dict))
    elif hasattr(value, "items") and isinstance(value.items, list):
        yield from (item for item in value.items if isinstance(item, dict))


class ViewCache:
    """Locally held copies of list, featured and detail views of the catalog."""

    def __init__(self):
        self._views: Dict[ViewKey, Any] = {}

    def get(self, key: ViewKey) -> Any:
        return self._views.get(key)

    def put(self, key: ViewKey, value: Any) -> None:
        self._views[key] = value

    def __contains__(self, key: ViewKey) -> bool:
        return key in self._views

    def keys(self) -> List[ViewKey]:
        return list(self._views)

    def views_holding(self, entity_type: str, entity_id: Any) -> List[ViewKey]:
        wanted = str(entity_id)
        return [
            key for key, value in self._views.items()
            if key.entity_type == entity_type
            and any(str(record.get("id")) == wanted for record in _records(value))
        ]

    def snapshot(self, keys: List[ViewKey]) -> Dict[ViewKey, Any]:
        return {key: copy.deepcopy(self._views[key]) for key in keys if key in self._views}

    def restore(self, snapshot: Dict[ViewKey, Any]) -> None:
        self._views.update(snapshot)
        logger.debug(f"Restored {len(snapshot)} view(s)")

    def apply(self, entity_type: str, entity_id: Any, changes: Dict[str, Any]) -> int:
        """Write `changes` into every cached copy of the record. Returns the number of copies touched."""
        wanted = str(entity_id)
        touched = 0
        for key in self.views_holding(entity_type, entity_id):
            for record in _records(self._views[key]):
                if str(record.get("id")) == wanted:
                    record.update(changes)
                    touched += 1
        return touched

    def invalidate(self, key: ViewKey) -> None:
        self._views.pop(key, None)

    def invalidate_lists(self, entity_type: str) -> None:
        for key in [k for k in self._views if k.kind == LIST and k.entity_type == entity_type]:
            del self._views[key]

    def invalidate_featured(self, entity_type: str) -> None:
        self.invalidate(featured_key(entity_type))

    def invalidate_detail(self, entity_type: str, entity_id: Any) -> None:
        self.invalidate(detail_key(entity_type, entity_id))
