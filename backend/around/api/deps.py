"""
Service dependencies for FastAPI routes.

Routes declare the service they need; the shared adapter handles are
created once and reused across requests. Tests replace any of these
with ``app.dependency_overrides``.
"""

from fastapi import Depends

from around.db.search import RecordStore, get_record_store
from around.services.accounts import AccountService
from around.services.blob_store import BlobStore, get_blob_store
from around.services.ingestion import IngestionPipeline
from around.services.post_query import PostQueryService
from around.services.vision import FaceScorer, get_face_scorer


def get_ingestion_pipeline(
    record_store: RecordStore = Depends(get_record_store),
    blob_store: BlobStore = Depends(get_blob_store),
    scorer: FaceScorer = Depends(get_face_scorer),
) -> IngestionPipeline:
    return IngestionPipeline(record_store, blob_store, scorer)


def get_post_query_service(
    record_store: RecordStore = Depends(get_record_store),
) -> PostQueryService:
    return PostQueryService(record_store)


def get_account_service(
    record_store: RecordStore = Depends(get_record_store),
) -> AccountService:
    return AccountService(record_store)
