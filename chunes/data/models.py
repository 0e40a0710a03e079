import math
import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Optional, Union

_INTEGER = re.compile(r"[+-]?[0-9]+")
_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def coerce_number(raw: str) -> Union[int, float]:
    """Loosely convert text to a number, NaN when it is not numeric.

    Blank text is 0, decimal and exponent notation are accepted, and whole
    values come back as ``int``. Never raises.
    """
    text = raw.strip()
    if not text:
        return 0
    if not _NUMBER.fullmatch(text):
        return math.nan
    try:
        if _INTEGER.fullmatch(text):
            return int(text)
        value = float(text)
    except ValueError:
        # int() refuses digit runs past the interpreter's conversion limit
        return math.nan
    if math.isfinite(value) and value.is_integer():
        return int(value)
    return value


@dataclass(frozen=True)
class ParsedTrackMetadata:
    """Metadata decoded from a Beatport download filename."""

    track_id: Union[int, float]
    track_name: str
    artists: str
    mix_name: str
    bpm: Optional[int]
    musical_key: Optional[str]
    camelot_key: Optional[str]
    label: str
    release_date: Optional[str]
    purchase_date: Optional[str]
    file_ext: str

    @property
    def has_valid_track_id(self) -> bool:
        return not (isinstance(self.track_id, float) and not math.isfinite(self.track_id))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dict (a non-finite track_id becomes None)."""
        data = asdict(self)
        data["track_id"] = self.track_id if self.has_valid_track_id else None
        return data


@dataclass(frozen=True)
class ParseError:
    """A filename that could not be split into its fields."""

    error: str
    stem: str
    ext: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


ParseResult = Union[ParsedTrackMetadata, ParseError]

TRACK_FIELDS = [f.name for f in fields(ParsedTrackMetadata)]


def _optional_int(value: str) -> Optional[int]:
    return int(value) if value else None


@dataclass
class TrackRow:
    """A decoded track merged with the transport metadata it arrived with."""

    insert_id: str
    source: str
    object_name: str
    size_bytes: Optional[int]
    content_type: Optional[str]
    generation: Optional[str]
    ingested_at: str
    track: ParsedTrackMetadata

    @classmethod
    def from_parsed(
        cls,
        parsed: ParsedTrackMetadata,
        insert_id: str,
        source: str,
        object_name: str,
        ingested_at: str,
        size_bytes: Optional[int] = None,
        content_type: Optional[str] = None,
        generation: Optional[str] = None,
    ) -> "TrackRow":
        return cls(
            insert_id=insert_id,
            source=source,
            object_name=object_name,
            size_bytes=size_bytes,
            content_type=content_type,
            generation=generation,
            ingested_at=ingested_at,
            track=parsed,
        )

    def to_record(self) -> dict[str, Any]:
        """Flatten to a JSON-safe dict, transport fields first."""
        record: dict[str, Any] = {
            "insert_id": self.insert_id,
            "source": self.source,
            "object_name": self.object_name,
            "size_bytes": self.size_bytes,
            "content_type": self.content_type,
            "generation": self.generation,
        }
        record.update(self.track.to_dict())
        record["ingested_at"] = self.ingested_at
        return record

    def to_csv_row(self) -> dict[str, str]:
        """Flatten to CSV-compatible dict, None becomes an empty string."""
        row = {}
        for key, value in self.to_record().items():
            row[key] = "" if value is None else str(value)
        return row

    @classmethod
    def from_csv_row(cls, row: dict[str, str]) -> "TrackRow":
        """Reconstruct from flattened CSV row."""
        track = ParsedTrackMetadata(
            track_id=coerce_number(row["track_id"]) if row["track_id"] else math.nan,
            track_name=row["track_name"],
            artists=row["artists"],
            mix_name=row["mix_name"],
            bpm=_optional_int(row["bpm"]),
            musical_key=row["musical_key"] or None,
            camelot_key=row["camelot_key"] or None,
            label=row["label"],
            release_date=row["release_date"] or None,
            purchase_date=row["purchase_date"] or None,
            file_ext=row["file_ext"],
        )
        return cls(
            insert_id=row["insert_id"],
            source=row["source"],
            object_name=row["object_name"],
            size_bytes=_optional_int(row["size_bytes"]),
            content_type=row["content_type"] or None,
            generation=row["generation"] or None,
            ingested_at=row["ingested_at"],
            track=track,
        )
