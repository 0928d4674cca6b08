"""Integration tests for the operator maintenance endpoints."""

from vintage_admin.models.registry import SongStatus


class TestArtistReconciliation:
    async def test_dry_run_then_reconcile(self, client, admin_headers, make) -> None:
        keep = await make.artist("Queen", minutes=0)
        await make.song(keep)
        dup = await make.artist(stage_name=None, name="queen", minutes=1)

        dry = await client.get("/api/maintenance/artists/duplicates", headers=admin_headers)
        assert dry.status_code == 200
        [group] = dry.json()["groups"]
        assert group["state"] == "classified"
        assert group["canonicalId"] == str(keep.id)
        assert {a["id"] for a in group["artists"]} == {str(keep.id), str(dup.id)}

        merged = await client.post("/api/maintenance/artists/reconcile", headers=admin_headers)
        assert merged.json()["merged"] == 1
        assert (await client.get(f"/api/artists/{dup.id}", headers=admin_headers)).status_code == 404

        again = await client.post("/api/maintenance/artists/reconcile", headers=admin_headers)
        assert again.json() == {"dryRun": False, "groups": [], "merged": 0, "rejected": 0, "failed": 0}

    async def test_requires_admin(self, client) -> None:
        response = await client.post("/api/maintenance/artists/reconcile")
        assert response.status_code == 401


class TestCatalogMaintenance:
    async def test_genre_usage(self, client, admin_headers, make) -> None:
        rock = await make.genre("Rock")
        await make.genre("Polka")
        artist = await make.artist("Queen")
        await make.song(artist, genres=[rock])
        await make.song(artist, genres=[rock])

        response = await client.get("/api/maintenance/genres/usage", headers=admin_headers)

        assert [(g["name"], g["songCount"]) for g in response.json()] == [("Rock", 2), ("Polka", 0)]

    async def test_fix_song_urls(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")
        moved = await make.song(
            artist,
            file_url="http://old-cdn.local:9000/songs/a.mp3",
            cover_art_url="http://old-cdn.local:9000/covers/a.jpg",
        )
        await make.song(artist, file_url="https://cdn.example.com/songs/b.mp3")

        response = await client.post(
            "/api/maintenance/songs/fix-urls",
            headers=admin_headers,
            json={"fromHost": "old-cdn.local:9000", "toHost": "cdn.example.com"},
        )

        assert response.json() == {"updated": 1}
        song = (await client.get(f"/api/songs/{moved.id}", headers=admin_headers)).json()
        assert song["fileUrl"] == "http://cdn.example.com/songs/a.mp3"
        assert song["coverArtUrl"] == "http://cdn.example.com/covers/a.jpg"


class TestCatalogStats:
    async def test_counts_and_top_artists(self, client, admin_headers, make) -> None:
        """Test that the dashboard stats count rows and rank artists by followers."""
        fan_a, fan_b = await make.user(), await make.user()
        queen = await make.artist("Queen", featured=True)
        sade = await make.artist("Sade", minutes=1)
        await make.song(queen, status=SongStatus.DRAFT)
        await make.song(sade, is_featured=True)
        await make.follow(sade, fan_a)
        await make.follow(sade, fan_b)
        await make.follow(queen, fan_a)
        await make.playlist(fan_a)

        response = await client.get("/api/maintenance/stats", headers=admin_headers, params={"top": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["users"] == 3
        assert body["artists"] == 2
        assert (body["songs"], body["publishedSongs"]) == (2, 1)
        assert body["playlists"] == 1
        assert (body["featuredSongs"], body["featuredArtists"], body["featuredPlaylists"]) == (1, 1, 0)
        assert body["topArtists"] == [
            {"id": str(sade.id), "displayName": "Sade", "followerCount": 2, "songCount": 1}
        ]

    async def test_requires_admin(self, client) -> None:
        response = await client.get("/api/maintenance/stats")
        assert response.status_code == 401
