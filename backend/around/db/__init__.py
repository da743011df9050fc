"""Record store access and index bootstrap."""

from around.db.search import (
    RecordStore,
    close_record_store,
    get_record_store,
    init_record_store,
)

__all__ = [
    "RecordStore",
    "init_record_store",
    "get_record_store",
    "close_record_store",
]
