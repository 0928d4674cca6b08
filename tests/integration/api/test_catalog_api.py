"""Integration tests for users, artists, songs, genres and playlists CRUD."""

from sqlalchemy.future import select

from vintage_admin.models.registry import Genre, SongStatus


class TestUsers:
    async def test_create_and_page(self, client, admin_headers) -> None:
        response = await client.post(
            "/api/users",
            headers=admin_headers,
            json={"email": "New@Example.com", "username": "newbie", "password": "secret1", "first_name": "Ana"},
        )
        assert response.status_code == 201
        created = response.json()
        assert created["email"] == "new@example.com"
        assert created["firstName"] == "Ana"
        assert "passwordHash" not in created and "password_hash" not in created

        page = await client.get("/api/users", headers=admin_headers, params={"page": 1, "pageSize": 1})
        assert page.json()["total"] == 2
        assert len(page.json()["items"]) == 1

    async def test_email_is_unique_case_insensitively(self, client, admin_headers, admin_user) -> None:
        response = await client.post(
            "/api/users",
            headers=admin_headers,
            json={"email": "ADMIN@example.com", "username": "other", "password": "secret1"},
        )
        assert response.status_code == 409
        assert response.json()["detail"]["matchedId"] == str(admin_user.id)

        check = await client.get("/api/users/check-email", headers=admin_headers, params={"email": "Admin@Example.com"})
        assert check.json() == {"isDuplicate": True, "matchedId": str(admin_user.id)}

    async def test_user_with_playlists_cannot_be_deleted(self, client, admin_headers, make) -> None:
        owner = await make.user()
        await make.playlist(owner)

        response = await client.delete(f"/api/users/{owner.id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["detail"]["dependencies"] == {"playlists": 1}


class TestArtists:
    async def test_create_with_legacy_key(self, client, admin_headers) -> None:
        """Test that the legacy `name` key creates an artist with a stageName."""
        response = await client.post("/api/artists", headers=admin_headers, json={"name": "Nina Simone"})
        assert response.status_code == 201
        assert response.json()["stageName"] == "Nina Simone"
        assert response.json()["featured"] is False

    async def test_duplicate_name_is_409_with_match(self, client, admin_headers, make) -> None:
        existing = await make.artist(stage_name=None, name="Pink Floyd")

        response = await client.post("/api/artists", headers=admin_headers, json={"stageName": " pink floyd"})

        assert response.status_code == 409
        assert response.json()["detail"]["matchedId"] == str(existing.id)

    async def test_link_existing_returns_the_match(self, client, admin_headers, make) -> None:
        existing = await make.artist("Queen")

        response = await client.post(
            "/api/artists", headers=admin_headers, json={"stageName": "QUEEN", "linkExisting": True}
        )

        assert response.status_code == 200
        assert response.json()["id"] == str(existing.id)

    async def test_check_name(self, client, admin_headers, make) -> None:
        existing = await make.artist("Queen")

        dup = await client.get("/api/artists/check-name", headers=admin_headers, params={"name": "queen "})
        own = await client.get(
            "/api/artists/check-name", headers=admin_headers,
            params={"name": "queen", "excludeId": str(existing.id)},
        )

        assert dup.json()["isDuplicate"] is True
        assert dup.json()["matchedName"] == "Queen"
        assert own.json()["isDuplicate"] is False

    async def test_rename_to_taken_name_is_409(self, client, admin_headers, make) -> None:
        await make.artist("Queen")
        other = await make.artist("Sade")

        response = await client.patch(f"/api/artists/{other.id}", headers=admin_headers, json={"stage_name": "queen"})
        assert response.status_code == 409

    async def test_user_backs_at_most_one_artist(self, client, admin_headers, make) -> None:
        owner = await make.user()
        await make.artist("Queen", user_id=owner.id)

        response = await client.post(
            "/api/artists", headers=admin_headers, json={"stageName": "Sade", "userId": str(owner.id)}
        )
        assert response.status_code == 409

    async def test_artist_with_songs_cannot_be_deleted(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")
        await make.song(artist)
        await make.follow(artist, await make.user())

        response = await client.delete(f"/api/artists/{artist.id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["detail"]["dependencies"] == {"songs": 1, "followers": 1}

    async def test_unreferenced_artist_is_deleted(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")
        response = await client.delete(f"/api/artists/{artist.id}", headers=admin_headers)
        assert response.status_code == 204
        assert (await client.get(f"/api/artists/{artist.id}", headers=admin_headers)).status_code == 404


class TestSongs:
    async def test_create_with_delimited_genres_and_text_duration(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")
        await make.genre("Rock")
        await make.genre("Opera")

        response = await client.post(
            "/api/songs",
            headers=admin_headers,
            json={"title": "Bohemian Rhapsody", "artist_id": str(artist.id), "duration": "354", "genres": "opera, ROCK"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["durationSeconds"] == 354
        assert body["genres"] == ["Opera", "Rock"]
        assert body["status"] == "draft"

    async def test_unusable_duration_becomes_zero(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")
        response = await client.post(
            "/api/songs", headers=admin_headers,
            json={"title": "Untimed", "artistId": str(artist.id), "durationSeconds": "n/a"},
        )
        assert response.json()["durationSeconds"] == 0

    async def test_unknown_genre_is_422(self, client, admin_headers, make) -> None:
        song = await make.song(await make.artist("Queen"))
        await make.genre("Rock")

        response = await client.post(
            f"/api/songs/{song.id}/genres", headers=admin_headers, json={"genres": ["Rock", "Polka"]}
        )

        assert response.status_code == 422
        assert "Polka" in response.json()["detail"]

    async def test_replace_genres_keeps_order(self, client, admin_headers, make) -> None:
        rock = await make.genre("Rock")
        jazz = await make.genre("Jazz")
        await make.genre("Soul")
        song = await make.song(await make.artist("Queen"), genres=[rock, jazz])

        response = await client.post(
            f"/api/songs/{song.id}/genres", headers=admin_headers, json={"genres": "soul|jazz"}
        )

        assert response.status_code == 200
        assert response.json()["genres"] == ["Soul", "Jazz"]

    async def test_non_list_genres_are_422_and_keep_links(self, client, admin_headers, make) -> None:
        """Test that a numeric genres value is rejected rather than clearing the song."""
        rock = await make.genre("Rock")
        song = await make.song(await make.artist("Queen"), genres=[rock])

        response = await client.post(f"/api/songs/{song.id}/genres", headers=admin_headers, json={"genres": 42})

        assert response.status_code == 422
        song_body = (await client.get(f"/api/songs/{song.id}", headers=admin_headers)).json()
        assert song_body["genres"] == ["Rock"]

    async def test_song_in_playlist_cannot_be_deleted(self, client, admin_headers, make) -> None:
        song = await make.song(await make.artist("Queen"))
        await make.playlist(await make.user(), songs=[song])

        response = await client.delete(f"/api/songs/{song.id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["detail"]["dependencies"] == {"playlists": 1}

    async def test_filter_by_status(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")
        await make.song(artist, status=SongStatus.DRAFT)
        await make.song(artist, status=SongStatus.PUBLISHED)

        response = await client.get("/api/songs", headers=admin_headers, params={"status": "draft"})
        assert response.json()["total"] == 1


class TestGenres:
    async def test_genre_in_use_cannot_be_deleted(self, client, admin_headers, make) -> None:
        """Test that a refused delete leaves the genre and the song's link in place."""
        rock = await make.genre("Rock")
        song = await make.song(await make.artist("Queen"), genres=[rock])

        response = await client.delete(f"/api/genres/{rock.id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["detail"]["dependencies"] == {"songs": 1}
        assert (await client.get(f"/api/genres/{rock.id}", headers=admin_headers)).json()["name"] == "Rock"
        song_body = (await client.get(f"/api/songs/{song.id}", headers=admin_headers)).json()
        assert song_body["genres"] == ["Rock"]

    async def test_unused_genre_is_deleted(self, client, admin_headers, make, session_factory) -> None:
        polka = await make.genre("Polka")

        response = await client.delete(f"/api/genres/{polka.id}", headers=admin_headers)

        assert response.status_code == 204
        async with session_factory() as session:
            assert (await session.execute(select(Genre))).scalars().all() == []

    async def test_genre_names_are_unique_case_insensitively(self, client, admin_headers, make) -> None:
        await make.genre("Rock")
        response = await client.post("/api/genres", headers=admin_headers, json={"name": "ROCK"})
        assert response.status_code == 409

    async def test_color_must_be_hex(self, client, admin_headers) -> None:
        response = await client.post("/api/genres", headers=admin_headers, json={"name": "Soul", "colorHex": "red"})
        assert response.status_code == 422


class TestPlaylists:
    async def test_create_with_ordered_songs(self, client, admin_headers, make) -> None:
        artist = await make.artist("Queen")
        first = await make.song(artist)
        second = await make.song(artist)
        owner = await make.user()

        response = await client.post(
            "/api/playlists",
            headers=admin_headers,
            json={"name": "Mix", "userId": str(owner.id), "songIds": [str(second.id), str(first.id)]},
        )

        assert response.status_code == 201
        assert response.json()["songIds"] == [str(second.id), str(first.id)]
        assert response.json()["ownerUserId"] == str(owner.id)

    async def test_repeated_song_is_422(self, client, admin_headers, make) -> None:
        song = await make.song(await make.artist("Queen"))
        owner = await make.user()

        response = await client.post(
            "/api/playlists",
            headers=admin_headers,
            json={"name": "Mix", "ownerUserId": str(owner.id), "songIds": [str(song.id), str(song.id)]},
        )
        assert response.status_code == 422
