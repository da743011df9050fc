"""
Index bootstrap.

Creates the post and user indices with their mappings when they do not
exist. Runs once at startup before the service accepts traffic, and can
be run on its own:

    python -m around.db.bootstrap

A failure here aborts the process.
"""

import sys

from around.core.config import settings
from around.core.errors import RecordStoreError
from around.core.logging import get_logger, setup_logging
from around.db.search import RecordStore, get_record_store

logger = get_logger(__name__)

# location is a geo_point so radius queries work; face is a float so
# threshold queries work. Everything else is stored, not indexed.
POST_MAPPING = {
    "mappings": {
        "properties": {
            "user": {"type": "keyword", "index": False},
            "message": {"type": "keyword", "index": False},
            "location": {"type": "geo_point"},
            "url": {"type": "keyword", "index": False},
            "type": {"type": "keyword", "index": False},
            "face": {"type": "float"},
        }
    }
}

USER_MAPPING = {
    "mappings": {
        "properties": {
            "username": {"type": "keyword"},
            "password": {"type": "keyword", "index": False},
            "age": {"type": "long", "index": False},
            "gender": {"type": "keyword", "index": False},
        }
    }
}


def ensure_indices(store: RecordStore) -> list[str]:
    """
    Create any missing index.

    Returns:
        Names of the indices that were created

    Raises:
        RecordStoreError: If the store cannot be reached or creation fails
    """
    created = []
    for index, mapping in (
        (settings.POST_INDEX, POST_MAPPING),
        (settings.USER_INDEX, USER_MAPPING),
    ):
        if store.exists(index):
            continue
        store.create_collection(index, mapping)
        created.append(index)

    logger.info("indices_ready", created=created)
    return created


def main() -> int:
    setup_logging()
    try:
        ensure_indices(get_record_store())
    except RecordStoreError as e:
        logger.critical("index_bootstrap_failed", error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
