"""
Operator-triggered reconciliation of duplicate artist records.

A group is every artist whose display name is equal after trimming and
case-folding. Each group moves through

    DETECTED -> CLASSIFIED -> MERGED | REJECTED   (FAILED if the database errors mid-merge)

The merge of one group runs in one transaction: references are re-pointed,
then the duplicates are deleted, then the transaction commits. If anything
fails the whole group is rolled back, so a later run sees it untouched and
can try again. Once merged a group no longer exists, which makes a second
run a no-op.

Nothing here runs on normal request traffic; it is reached only from the
maintenance router and scripts/reconcile_artists.py.
"""
import enum
import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.core.normalization import display_name
from vintage_admin.models.registry import Album, Artist, ArtistFollower, Song
from vintage_admin.services.database import Base

logger = logging.getLogger(__name__)

# Foreign keys to artists.id that a merge knows how to move: table -> column
REPOINTABLE_REFERENCES: Dict[str, str] = {
    "songs": "artist_id",
    "albums": "artist_id",
    "artist_followers": "artist_id",
}

# Columns copied onto the canonical record when it has no value of its own
_BACKFILL_COLUMNS = ("stage_name", "biography", "nationality_code")


class GroupState(str, enum.Enum):
    DETECTED = "detected"
    CLASSIFIED = "classified"
    MERGED = "merged"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class ArtistRecord:
    id: UUID
    display_name: Optional[str]
    owner_user_id: Optional[UUID]
    song_count: int
    created_at: datetime


@dataclass
class DuplicateGroup:
    normalized_name: str
    artists: List[ArtistRecord]
    state: GroupState = GroupState.DETECTED
    canonical_id: Optional[UUID] = None
    reason: Optional[str] = None

    @property
    def duplicate_ids(self) -> List[UUID]:
        return [artist.id for artist in self.artists if artist.id != self.canonical_id]


@dataclass
class ReconcileReport:
    dry_run: bool
    groups: List[DuplicateGroup] = field(default_factory=list)

    def count(self, state: GroupState) -> int:
        return sum(1 for group in self.groups if group.state == state)

    @property
    def merged(self) -> int:
        return self.count(GroupState.MERGED)

    @property
    def rejected(self) -> int:
        return self.count(GroupState.REJECTED)

    @property
    def failed(self) -> int:
        return self.count(GroupState.FAILED)


def identity_key(name: Optional[str]) -> str:
    return (name or "").strip().casefold()


def classify(group: DuplicateGroup) -> DuplicateGroup:
    """
    Pick the canonical record: most songs, then earliest created, then lowest
    id so that the choice never depends on query order.
    """
    ranked = sorted(
        group.artists,
        key=lambda artist: (-artist.song_count, artist.created_at, str(artist.id)),
    )
    group.canonical_id = ranked[0].id
    group.state = GroupState.CLASSIFIED
    return group


class ArtistReconciler:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_duplicate_groups(self) -> List[DuplicateGroup]:
        """Groups of two or more artists sharing a case-insensitive display name."""
        song_counts = (
            select(Song.artist_id, func.count(Song.id).label("song_count"))
            .group_by(Song.artist_id)
            .subquery()
        )
        stmt = select(
            Artist.id,
            Artist.stage_name,
            Artist.name,
            Artist.user_id,
            Artist.created_at,
            func.coalesce(song_counts.c.song_count, 0).label("song_count"),
        ).outerjoin(song_counts, song_counts.c.artist_id == Artist.id)
        result = await self.db.execute(stmt)

        by_name: Dict[str, List[ArtistRecord]] = {}
        for row in result.mappings():
            name = display_name(row)
            key = identity_key(name)
            if not key:
                continue
            by_name.setdefault(key, []).append(
                ArtistRecord(
                    id=row["id"],
                    display_name=name,
                    owner_user_id=row["user_id"],
                    song_count=row["song_count"],
                    created_at=row["created_at"],
                )
            )

        groups = [
            DuplicateGroup(normalized_name=key, artists=artists)
            for key, artists in sorted(by_name.items())
            if len(artists) > 1
        ]
        logger.info(f"Found {len(groups)} duplicate artist group(s)")
        return groups

    async def _find_blocker(self, group: DuplicateGroup) -> Optional[str]:
        """Reason this group cannot be merged safely, or None."""
        owners = {artist.owner_user_id for artist in group.artists if artist.owner_user_id}
        if len(owners) > 1:
            # Playlists belong to these accounts; moving them would merge two users
            return f"records are linked to {len(owners)} different user accounts"

        duplicate_ids = group.duplicate_ids
        for table in Base.metadata.sorted_tables:
            if table.name == Artist.__tablename__:
                continue
            for fk in table.foreign_keys:
                if fk.column.table.name != Artist.__tablename__:
                    continue
                if REPOINTABLE_REFERENCES.get(table.name) == fk.parent.name:
                    continue
                count = await self.db.scalar(
                    select(func.count()).select_from(table).where(fk.parent.in_(duplicate_ids))
                )
                if count:
                    return f"{count} row(s) in {table.name}.{fk.parent.name} have no known re-pointing rule"
        return None

    async def _repoint_followers(self, canonical_id: UUID, duplicate_ids: List[UUID]) -> None:
        # A user following both records keeps a single follow of the canonical one
        result = await self.db.execute(
            select(ArtistFollower).where(ArtistFollower.artist_id.in_([canonical_id, *duplicate_ids]))
        )
        followers = sorted(result.scalars().all(), key=lambda f: f.artist_id != canonical_id)
        seen_users = set()
        for follower in followers:
            if follower.user_id in seen_users:
                await self.db.delete(follower)
            else:
                seen_users.add(follower.user_id)
                follower.artist_id = canonical_id
        await self.db.flush()

    async def _merge(self, group: DuplicateGroup) -> None:
        canonical_id = group.canonical_id
        duplicate_ids = group.duplicate_ids

        result = await self.db.execute(select(Artist).where(Artist.id.in_([canonical_id, *duplicate_ids])))
        records = {artist.id: artist for artist in result.scalars().all()}
        canonical = records[canonical_id]
        duplicates = [records[artist_id] for artist_id in duplicate_ids if artist_id in records]

        # 1. Re-point everything that references a duplicate
        for model in (Song, Album):
            await self.db.execute(
                update(model)
                .where(model.artist_id.in_(duplicate_ids))
                .values(artist_id=canonical_id)
                .execution_options(synchronize_session=False)
            )
        await self._repoint_followers(canonical_id, duplicate_ids)

        # 2. Carry over what the canonical record is missing
        for duplicate in duplicates:
            for column in _BACKFILL_COLUMNS:
                if getattr(canonical, column) is None and getattr(duplicate, column) is not None:
                    setattr(canonical, column, getattr(duplicate, column))
            if duplicate.featured:
                canonical.featured = True

        owner_id = next((d.user_id for d in duplicates if d.user_id is not None), None)
        if canonical.user_id is None and owner_id is not None:
            # user_id is unique, so release it from the duplicate before moving it
            for duplicate in duplicates:
                duplicate.user_id = None
            await self.db.flush()
            canonical.user_id = owner_id

        # 3. Remove the now-empty duplicates
        for duplicate in duplicates:
            await self.db.delete(duplicate)
        await self.db.commit()

    async def merge_group(self, group: DuplicateGroup) -> DuplicateGroup:
        if group.state == GroupState.DETECTED:
            classify(group)

        reason = await self._find_blocker(group)
        if reason:
            group.state = GroupState.REJECTED
            group.reason = reason
            logger.warning(f"Not merging artists named '{group.normalized_name}': {reason}")
            return group

        try:
            await self._merge(group)
        except SQLAlchemyError as e:
            await self.db.rollback()
            group.state = GroupState.FAILED
            group.reason = str(e)
            logger.error(f"Merge of '{group.normalized_name}' rolled back: {e}\n{traceback.format_exc()}")
            return group
        except Exception:
            await self.db.rollback()
            raise

        group.state = GroupState.MERGED
        logger.info(
            f"Merged {len(group.duplicate_ids)} duplicate(s) of '{group.normalized_name}' "
            f"into artist {group.canonical_id}"
        )
        return group

    async def reconcile(self, dry_run: bool = False) -> ReconcileReport:
        """
        Detect, classify and (unless dry_run) merge every duplicate group.
        Each group succeeds or fails on its own; the report lists all of them.
        """
        report = ReconcileReport(dry_run=dry_run)
        for group in await self.find_duplicate_groups():
            classify(group)
            if not dry_run:
                await self.merge_group(group)
            report.groups.append(group)

        logger.info(
            f"Artist reconciliation finished (dry_run={dry_run}): "
            f"{report.merged} merged, {report.rejected} rejected, {report.failed} failed"
        )
        return report
