import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional, Tuple, Union

from vintage_admin.core.exceptions import NameLoadError, TransientNetworkError

logger = logging.getLogger(__name__)

NameEntry = Union[str, Tuple[Any, Optional[str]]]
NameLoader = Callable[[], Awaitable[Iterable[NameEntry]]]


@dataclass(frozen=True)
class IdentityMatch:
    is_duplicate: bool
    matched_id: Any = None
    matched_name: Optional[str] = None


NO_MATCH = IdentityMatch(is_duplicate=False)


def _identity_key(name: Optional[str]) -> str:
    return (name or "").strip().casefold()


def resolve_or_flag_duplicate(candidate_name: str, existing_names: Iterable[NameEntry]) -> IdentityMatch:
    """
    Case-insensitive exact match of a trimmed candidate against every existing name.

    `existing_names` may hold plain names or (id, name) pairs; plain names
    have no id to report, so matched_id stays None for them.
    """
    key = _identity_key(candidate_name)
    if not key:
        return NO_MATCH

    for entry in existing_names:
        if isinstance(entry, str):
            entry_id, entry_name = None, entry
        else:
            entry_id, entry_name = entry
        if _identity_key(entry_name) == key:
            return IdentityMatch(is_duplicate=True, matched_id=entry_id, matched_name=entry_name)
    return NO_MATCH


class IdentityResolver:
    """
    Looks a name up against whatever `loader` returns.

    A TransientNetworkError from the loader is retried once. If the retry
    fails too, or the loader raises NameLoadError, the lookup reports
    "no match" so that creation is not blocked and the miss is logged.
    Anything else the loader raises propagates.
    """

    def __init__(self, loader: NameLoader, label: str = "name"):
        self.loader = loader
        self.label = label

    async def _load(self) -> Optional[Iterable[NameEntry]]:
        for attempt in (1, 2):
            try:
                return await self.loader()
            except TransientNetworkError as e:
                logger.warning(f"Loading existing {self.label}s failed (attempt {attempt}/2): {e}")
            except NameLoadError as e:
                logger.warning(f"Loading existing {self.label}s failed: {e}")
                return None
        return None

    async def resolve(self, candidate_name: str, exclude_id: Any = None) -> IdentityMatch:
        existing = await self._load()
        if existing is None:
            logger.error(
                f"Could not load existing {self.label}s; treating '{candidate_name}' as new"
            )
            return NO_MATCH

        if exclude_id is not None:
            existing = [
                entry for entry in existing
                if isinstance(entry, str) or str(entry[0]) != str(exclude_id)
            ]
        match = resolve_or_flag_duplicate(candidate_name, existing)
        if match.is_duplicate:
            logger.info(f"{self.label} '{candidate_name}' matches existing id={match.matched_id}")
        return match
