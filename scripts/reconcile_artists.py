"""
Merge artist records that share a display name (case-insensitive).

    python scripts/reconcile_artists.py --dry-run   # report only
    python scripts/reconcile_artists.py             # merge

Safe to run repeatedly; once a group is merged it is no longer reported.
"""
import argparse
import asyncio
import logging
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend')))

from vintage_admin.services.artist_reconciler import ArtistReconciler, GroupState
from vintage_admin.services.database import SessionLocal, engine


async def run(dry_run: bool) -> int:
    async with SessionLocal() as session:
        report = await ArtistReconciler(session).reconcile(dry_run=dry_run)
    await engine.dispose()

    if not report.groups:
        print("No duplicate artists found.")
        return 0

    for group in report.groups:
        print(f"\n'{group.normalized_name}' -> {group.state.value}")
        for artist in group.artists:
            marker = "*" if artist.id == group.canonical_id else " "
            print(f"  {marker} {artist.id}  {artist.display_name!r}  songs={artist.song_count}")
        if group.reason:
            print(f"    reason: {group.reason}")

    print(f"\nmerged={report.merged} rejected={report.rejected} failed={report.failed}")
    return 1 if any(group.state == GroupState.FAILED for group in report.groups) else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reconcile duplicate artist records")
    parser.add_argument("--dry-run", action="store_true", help="only report the groups that would be merged")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    sys.exit(asyncio.run(run(args.dry_run)))
