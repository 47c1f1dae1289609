"""Core constants used across humcorpus modules.

This module centralizes file names, defaults, and scoring policy values.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_UNIFIED_ROOT = Path("data") / "unified"
INDEX_FILE_NAME = "index.json"
RECENT_FILE_NAME = "recent.json"
MANIFEST_FILE_NAME = "unified-manifest.json"
SEARCH_INDEX_FILE_NAME = "search-index.json"
VALIDATION_REPORT_FILE_NAME = "validation-report.json"
CHUNK_FILE_PREFIX = "chunk-"
STAGING_DIR_PREFIX = ".staging-"
PREVIOUS_DIR_PREFIX = ".previous-"
HASH_ALGORITHM = "sha256"
RECORD_ID_DIGEST_LENGTH = 16

SUPPORTED_CATEGORIES = (
    "conflict",
    "infrastructure",
    "water",
    "health",
    "refugee",
    "displacement",
    "education",
    "emergency",
)
SUPPORTED_STRATEGIES = ("period", "chunk")
SUPPORTED_RAW_EXTENSIONS = (".json", ".jsonl")

UNKNOWN_REGION = "Unknown"
UNKNOWN_LOCATION = "Unknown"
CONFLICT_BASELINE_DATE = "2023-10-07"
ACTIVE_CONFLICT_END_DATE = "2024-01-01"

DEFAULT_BASELINE_START = CONFLICT_BASELINE_DATE
DEFAULT_MAX_FILE_BYTES = 200 * 1024 * 1024
DEFAULT_RECENT_DAYS = 30
DEFAULT_CHUNK_SIZE = 10000
DEFAULT_LOG_LEVEL = "INFO"

DEFAULT_SOURCE_PRIOR = 0.6
CORROBORATION_BONUS = 0.05
MAX_CORROBORATION_COUNT = 3
CORROBORATION_DAY_WINDOW = 1
CORROBORATION_RADIUS_METERS = 1000.0
EARTH_RADIUS_METERS = 6371000.0
COMPLETENESS_WEIGHT = 0.4
CONSISTENCY_WEIGHT = 0.3
ACCURACY_WEIGHT = 0.3
COORDINATE_PENALTY = 0.4
IMPLAUSIBLE_COUNT_PENALTY = 0.2
COERCED_FIELD_PENALTY = 0.1
MAX_COERCED_PENALTY = 0.3
FUTURE_DATE_PENALTY = 0.2
MAX_PLAUSIBLE_COUNT = 100000
SCORE_PRECISION = 6

RAW_EXCERPT_MAX_FIELDS = 8
RAW_EXCERPT_MAX_CHARS = 200
SEARCH_TEXT_MAX_CHARS = 280
SEARCH_FUZZY_THRESHOLD = 0.8
DEFAULT_SEARCH_LIMIT = 20
