"""Business logic services."""

from around.services.accounts import AccountService
from around.services.blob_store import BlobStore, get_blob_store
from around.services.ingestion import IngestionPipeline
from around.services.post_query import PostQueryService
from around.services.vision import FaceScorer, get_face_scorer

__all__ = [
    "AccountService",
    "BlobStore",
    "get_blob_store",
    "IngestionPipeline",
    "PostQueryService",
    "FaceScorer",
    "get_face_scorer",
]
