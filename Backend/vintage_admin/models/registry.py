# Import every model so Base.metadata knows all tables (create_all, reconciler FK discovery)
from vintage_admin.models.user import User, UserRole
from vintage_admin.models.artist import Artist
from vintage_admin.models.album import Album
from vintage_admin.models.artist_follower import ArtistFollower
from vintage_admin.models.genre import Genre
from vintage_admin.models.song_genre import SongGenre
from vintage_admin.models.song import Song, SongStatus
from vintage_admin.models.playlist_song import PlaylistSong
from vintage_admin.models.playlist import Playlist, PlaylistVisibility

__all__ = [
    "User", "UserRole", "Artist", "Album", "ArtistFollower", "Genre", "SongGenre",
    "Song", "SongStatus", "PlaylistSong", "Playlist", "PlaylistVisibility",
]
