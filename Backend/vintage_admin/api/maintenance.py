import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vintage_admin.core.normalization import display_name
from vintage_admin.core.security import get_current_admin
from vintage_admin.models.user import User
from vintage_admin.schemas.genre import GenreUsage
from vintage_admin.schemas.maintenance import (
    CatalogStats,
    DuplicateArtist,
    DuplicateGroupResponse,
    FixUrlsRequest,
    FixUrlsResponse,
    ReconcileReportResponse,
    TopArtist,
)
from vintage_admin.services import catalog_maintenance
from vintage_admin.services.artist_reconciler import ArtistReconciler, ReconcileReport
from vintage_admin.services.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


def _report_response(report: ReconcileReport) -> ReconcileReportResponse:
    return ReconcileReportResponse(
        dry_run=report.dry_run,
        groups=[
            DuplicateGroupResponse(
                normalized_name=group.normalized_name,
                state=group.state.value,
                canonical_id=group.canonical_id,
                reason=group.reason,
                artists=[
                    DuplicateArtist(
                        id=artist.id,
                        display_name=artist.display_name,
                        owner_user_id=artist.owner_user_id,
                        song_count=artist.song_count,
                        created_at=artist.created_at,
                    )
                    for artist in group.artists
                ],
            )
            for group in report.groups
        ],
        merged=report.merged,
        rejected=report.rejected,
        failed=report.failed,
    )


@router.get("/maintenance/artists/duplicates", response_model=ReconcileReportResponse)
async def list_duplicate_artists(db: AsyncSession = Depends(get_db)):
    """Dry run: the groups a reconcile would touch and the canonical record it would keep."""
    report = await ArtistReconciler(db).reconcile(dry_run=True)
    return _report_response(report)


@router.post("/maintenance/artists/reconcile", response_model=ReconcileReportResponse)
async def reconcile_artists(db: AsyncSession = Depends(get_db), admin: User = Depends(get_current_admin)):
    logger.info(f"Artist reconciliation triggered by {admin.id}")
    report = await ArtistReconciler(db).reconcile(dry_run=False)
    return _report_response(report)


@router.get("/maintenance/genres/usage", response_model=List[GenreUsage])
async def genre_usage(db: AsyncSession = Depends(get_db)):
    usage = await catalog_maintenance.genre_usage(db)
    return [GenreUsage(id=genre.id, name=genre.name, song_count=count) for genre, count in usage]


@router.post("/maintenance/songs/fix-urls", response_model=FixUrlsResponse)
async def fix_song_urls(body: FixUrlsRequest, db: AsyncSession = Depends(get_db)):
    updated = await catalog_maintenance.fix_song_urls(db, body.from_host.strip(), body.to_host.strip())
    return FixUrlsResponse(updated=updated)


@router.get("/maintenance/stats", response_model=CatalogStats)
async def catalog_stats(top: int = Query(5, ge=0, le=50), db: AsyncSession = Depends(get_db)):
    """Dashboard counts plus the most followed artists."""
    counts = await catalog_maintenance.catalog_stats(db)
    leaders = await catalog_maintenance.top_artists(db, top) if top else []
    return CatalogStats(
        **counts,
        top_artists=[
            TopArtist(
                id=artist.id,
                display_name=display_name({"stage_name": artist.stage_name, "name": artist.name}),
                follower_count=followers,
                song_count=songs,
            )
            for artist, followers, songs in leaders
        ],
    )
