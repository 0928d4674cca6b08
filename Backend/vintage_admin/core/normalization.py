"""
Field normalization between persisted snake_case columns, legacy keys and the
camelCase API contract.

Every logical attribute that has been stored under more than one spelling is
listed once in FIELD_ALIASES: the canonical camelCase name followed by the
accepted spellings in read-priority order. Nothing outside this module should
check for alternate spellings.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from vintage_admin.core.config import settings

logger = logging.getLogger(__name__)

ARTIST = "artist"
SONG = "song"
PLAYLIST = "playlist"
USER = "user"
GENRE = "genre"

_COMMON: Dict[str, Tuple[str, ...]] = {
    "id": ("id",),
    "createdAt": ("createdAt", "created_at"),
    "updatedAt": ("updatedAt", "updated_at"),
}

FIELD_ALIASES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    ARTIST: {
        **_COMMON,
        "stageName": ("stageName", "stage_name", "name"),
        "ownerUserId": ("ownerUserId", "owner_user_id", "userId", "user_id"),
        "featured": ("featured", "isFeatured", "is_featured"),
        "biography": ("biography", "bio"),
        "nationalityCode": ("nationalityCode", "nationality_code"),
    },
    SONG: {
        **_COMMON,
        "artistId": ("artistId", "artist_id"),
        "albumId": ("albumId", "album_id"),
        "title": ("title",),
        "featured": ("featured", "isFeatured", "is_featured"),
        "status": ("status",),
        "durationSeconds": ("durationSeconds", "duration_seconds", "duration"),
        "genres": ("genres",),
        "fileUrl": ("fileUrl", "file_url"),
        "coverArtUrl": ("coverArtUrl", "cover_art_url", "coverImageUrl", "cover_image_url"),
    },
    PLAYLIST: {
        **_COMMON,
        "ownerUserId": ("ownerUserId", "owner_user_id", "userId", "user_id"),
        "name": ("name",),
        "description": ("description",),
        "visibility": ("visibility",),
        "featured": ("featured", "isFeatured", "is_featured"),
        "songIds": ("songIds", "song_ids"),
    },
    USER: {
        **_COMMON,
        "email": ("email",),
        "username": ("username",),
        "firstName": ("firstName", "first_name"),
        "lastName": ("lastName", "last_name"),
        "role": ("role",),
        "isActive": ("isActive", "is_active"),
        "isVerified": ("isVerified", "is_verified"),
    },
    GENRE: {
        **_COMMON,
        "name": ("name",),
        "colorHex": ("colorHex", "color_hex"),
        "description": ("description",),
    },
}

# Canonical API name -> model column, where the column is not simply the snake_case form
_COLUMN_OVERRIDES: Dict[str, Dict[str, str]] = {
    ARTIST: {"ownerUserId": "user_id"},
    SONG: {"featured": "is_featured"},
    PLAYLIST: {"featured": "is_featured", "ownerUserId": "user_id"},
}

_DURATION_FIELDS = {SONG: "durationSeconds"}
_GENRE_LIST_FIELDS = {SONG: "genres"}

_GENRE_SEPARATORS = re.compile(r"[,;|]")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _aliases_for(entity_type: str) -> Dict[str, Tuple[str, ...]]:
    try:
        return FIELD_ALIASES[entity_type]
    except KeyError:
        raise ValueError(f"Unknown entity type for normalization: {entity_type}")


def coerce_duration(value: Any, *, field: str = "durationSeconds", record_id: Any = None) -> int:
    """Coerce a duration arriving as text or number to whole seconds, 0 when unusable."""
    if isinstance(value, bool):
        seconds = None
    elif isinstance(value, int):
        seconds = value
    elif isinstance(value, float):
        seconds = int(value) if value == value else None  # NaN
    elif isinstance(value, str):
        text = value.strip()
        try:
            seconds = int(text)
        except ValueError:
            try:
                seconds = int(float(text))
            except ValueError:
                seconds = None
    else:
        seconds = None

    if seconds is None or seconds < 0:
        if settings.is_development:
            logger.warning(
                f"Normalizer substituted 0 for {field}={value!r} (record id={record_id})"
            )
        return 0
    return seconds


def parse_genre_list(value: Any) -> List[str]:
    """
    Accepts a list of genre names or the legacy delimited string form and
    returns an ordered list without blanks or case-insensitive repeats.
    Any other type raises ValueError.
    """
    if value is None:
        return []
    if isinstance(value, str):
        candidates: Iterable[Any] = _GENRE_SEPARATORS.split(value)
    elif isinstance(value, (list, tuple)):
        candidates = value
    else:
        raise ValueError(f"genres must be a list or a delimited string, not {type(value).__name__}")

    seen = set()
    genres = []
    for item in candidates:
        if item is None:
            continue
        name = str(item).strip()
        if not name or name.casefold() in seen:
            continue
        seen.add(name.casefold())
        genres.append(name)
    return genres


def normalize(record: Mapping[str, Any], entity_type: str, partial: bool = False) -> Dict[str, Any]:
    """
    Map a heterogeneous record onto the canonical camelCase shape.

    For each aliased field the first spelling present (in priority order) wins
    and every other spelling is dropped. Keys that are not aliased pass through
    untouched. A null under one spelling yields to a value under a later one.
    With partial=False an absent duration becomes 0; PATCH bodies
    pass partial=True so that absent fields stay absent.
    """
    aliases = _aliases_for(entity_type)
    known_keys = {key for spellings in aliases.values() for key in spellings}

    canonical: Dict[str, Any] = {
        key: value for key, value in record.items() if key not in known_keys
    }
    for field, spellings in aliases.items():
        present = [key for key in spellings if key in record]
        if not present:
            continue
        # A null under a higher-priority key does not hide a value under a lower one
        chosen = next((key for key in present if record[key] is not None), present[0])
        canonical[field] = record[chosen]

    duration_field = _DURATION_FIELDS.get(entity_type)
    if duration_field and (duration_field in canonical or not partial):
        canonical[duration_field] = coerce_duration(
            canonical.get(duration_field),
            field=duration_field,
            record_id=canonical.get("id"),
        )

    genre_field = _GENRE_LIST_FIELDS.get(entity_type)
    if genre_field and genre_field in canonical:
        canonical[genre_field] = parse_genre_list(canonical[genre_field])

    return canonical


def column_name(field: str, entity_type: str) -> str:
    overrides = _COLUMN_OVERRIDES.get(entity_type, {})
    if field in overrides:
        return overrides[field]
    return _CAMEL_BOUNDARY.sub("_", field).lower()


def to_columns(record: Mapping[str, Any], entity_type: str) -> Dict[str, Any]:
    """Canonical record -> model column names, the one spelling used for writes."""
    canonical = normalize(record, entity_type, partial=True)
    return {column_name(field, entity_type): value for field, value in canonical.items()}


def display_name(record: Mapping[str, Any]) -> Optional[str]:
    """Artist display name from a raw row, whichever column holds it."""
    name = normalize(record, ARTIST, partial=True).get("stageName")
    if name is None:
        return None
    name = str(name).strip()
    return name or None
