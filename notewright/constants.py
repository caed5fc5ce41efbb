"""Constants used throughout the Notewright application."""

# Idempotency key
HASH_LENGTH = 8
CHECKSUM_BLOCK_SIZE = 4096

# Artifact suffixes (interim directory)
TRANSCRIPTION_SUFFIX = ".transcription.json"
CLASSIFICATION_SUFFIX = ".classification.json"
REQUEST_SUFFIX = ".request.json"
RESPONSE_SUFFIX = ".response.json"

# Directories created next to each note
CONTEXT_DIRNAME = ".context"
INTERIM_DIRNAME = ".interim"

# Note output
DEFAULT_NOTE_EXTENSION = "md"

# Watcher timings (in seconds)
FILE_WAIT_TIMEOUT = 60
FILE_STABILIZATION_CHECK_INTERVAL = 1

DEFAULT_AUDIO_EXTENSIONS = ["mp3", "m4a", "wav", "ogg", "webm", "mp4", "mpeg", "mpga"]
