"""Global configuration: paths, constants, settings."""

from pathlib import Path

# Accepted package extension (without the leading dot)
DEFAULT_PACKAGE_EXTENSION = "logicx"

# Streaming hash read size
HASH_CHUNK_SIZE = 1024 * 1024

# Entries whose name starts with this marker are skipped by walks
HIDDEN_PREFIX = "."

# Namespaces under the app data directory
WORKING_DIR = "working"
VERSIONS_DIR = "versions"
CHECKOUTS_DIR = "checkouts"

# Single metadata document holding projects + activity
METADATA_FILENAME = "snapshot.json"

# Default app data directory when LOGISHARE_APP_DIR is not set
DEFAULT_MACOS_APP_DIR = Path.home() / "Library" / "Application Support" / "LogiShare"
DEFAULT_XDG_APP_DIR = Path.home() / ".local" / "share" / "logishare"

# Conflict suffixes used by the merge engine
INCOMING_SUFFIX = "__fromVersion"
EXISTING_SUFFIX = "__fromA"
MERGE_INCOMING_SUFFIX = "__fromB"

# Fallback display strings
DEFAULT_ACTOR_NAME = "You"
DEFAULT_VERSION_MESSAGE = "Update"
DEFAULT_PROJECT_NAME = "Untitled"
INITIAL_VERSION_MESSAGE = "Initial import"
FORK_NAME_SUFFIX = " (Fork)"
MERGED_NAME_SUFFIX = " (Merged)"
