"""Constants used throughout chunes."""

# Separator between fields in a Beatport download filename
FIELD_DELIMITER = "--"

# track_id, track_name, artists, mix_name, bpm, key, release_date, label, purchase_date
MIN_FIELD_COUNT = 9

# Lead words that mark a title as a question when it ends in underscores
QUESTION_LEAD_WORDS = (
    "who", "what", "when", "where", "why", "how",
    "is", "are", "do", "does", "did",
    "can", "could", "will", "would",
)

# Snapshot export
SNAPSHOT_SCHEMA_VERSION = 1
SNAPSHOT_BASENAME = "chunes"
DEFAULT_SNAPSHOT_PREFIX = "snapshots/"
MANIFEST_PATH = "manifest/latest.json"

# Comment description written alongside the Camelot code in audio tags
TAG_COMMENT_DESC = "chunes"
