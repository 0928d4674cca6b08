"""Integration tests for featured flags and listings."""

from vintage_admin.models.registry import PlaylistVisibility, SongStatus


class TestSongFeatured:
    async def test_setting_twice_is_idempotent(self, client, admin_headers, make) -> None:
        """Test that featuring an already featured song leaves the same state."""
        rock = await make.genre("Rock")
        song = await make.song(await make.artist("Queen"), genres=[rock])

        first = await client.patch(f"/api/featured/songs/{song.id}", headers=admin_headers, json={"featured": True})
        second = await client.patch(f"/api/featured/songs/{song.id}", headers=admin_headers, json={"isFeatured": True})

        assert first.status_code == second.status_code == 200
        assert first.json()["featured"] is second.json()["featured"] is True
        listed = await client.get("/api/featured/songs")
        assert [item["id"] for item in listed.json()] == [str(song.id)]

    async def test_draft_song_cannot_be_featured(self, client, admin_headers, make) -> None:
        rock = await make.genre("Rock")
        song = await make.song(await make.artist("Queen"), genres=[rock], status=SongStatus.DRAFT)

        response = await client.patch(f"/api/featured/songs/{song.id}", headers=admin_headers, json={"featured": True})

        assert response.status_code == 422

    async def test_song_without_genres_cannot_be_featured(self, client, admin_headers, make) -> None:
        song = await make.song(await make.artist("Queen"))

        response = await client.patch(f"/api/featured/songs/{song.id}", headers=admin_headers, json={"featured": True})

        assert response.status_code == 422
        assert "genre" in response.json()["detail"]

    async def test_unfeaturing_is_always_allowed(self, client, admin_headers, make) -> None:
        song = await make.song(await make.artist("Queen"), status=SongStatus.DRAFT)

        response = await client.patch(f"/api/featured/songs/{song.id}", headers=admin_headers, json={"featured": False})

        assert response.status_code == 200
        assert response.json()["featured"] is False

    async def test_missing_song_is_404(self, client, admin_headers) -> None:
        response = await client.patch(
            "/api/featured/songs/00000000-0000-0000-0000-000000000000",
            headers=admin_headers,
            json={"featured": True},
        )
        assert response.status_code == 404

    async def test_curation_requires_admin(self, client, make) -> None:
        song = await make.song(await make.artist("Queen"))
        response = await client.patch(f"/api/featured/songs/{song.id}", json={"featured": True})
        assert response.status_code == 401


class TestArtistFeatured:
    async def test_artist_flag_via_artist_route(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")

        response = await client.patch(f"/api/artists/{artist.id}/featured", headers=admin_headers, json={"featured": True})

        assert response.status_code == 200
        assert response.json()["featured"] is True
        listed = await client.get("/api/featured/artists")
        assert [item["id"] for item in listed.json()] == [str(artist.id)]

    async def test_no_artist_toggle_on_curation_routes(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")
        response = await client.patch(f"/api/featured/artists/{artist.id}", headers=admin_headers, json={"featured": True})
        assert response.status_code == 404

    async def test_featured_songs_topped_up_from_featured_artists(self, client, make) -> None:
        """Test that songs of featured artists fill the list without repeats."""
        rock = await make.genre("Rock")
        star = await make.artist("Queen", featured=True)
        explicit = await make.song(star, genres=[rock], is_featured=True)
        other = await make.song(star)
        await make.song(star, status=SongStatus.DRAFT)
        await make.song(await make.artist("Nobody"))

        response = await client.get("/api/featured/songs", params={"limit": 10})

        ids = [item["id"] for item in response.json()]
        assert ids[0] == str(explicit.id)
        assert sorted(ids) == sorted([str(explicit.id), str(other.id)])

    async def test_limit_is_clamped(self, client, make) -> None:
        rock = await make.genre("Rock")
        artist = await make.artist("Queen")
        for _ in range(3):
            await make.song(artist, genres=[rock], is_featured=True)

        response = await client.get("/api/featured/songs", params={"limit": 0})
        assert len(response.json()) == 1


class TestPlaylistFeatured:
    async def test_only_public_playlists_are_listed(self, client, admin_headers, make) -> None:
        owner = await make.user()
        public = await make.playlist(owner)
        private = await make.playlist(owner, visibility=PlaylistVisibility.PRIVATE)

        for playlist in (public, private):
            response = await client.patch(
                f"/api/featured/playlists/{playlist.id}", headers=admin_headers, json={"featured": True}
            )
            assert response.status_code == 200

        listed = await client.get("/api/featured/playlists")
        assert [item["id"] for item in listed.json()] == [str(public.id)]
