"""
Post ingestion pipeline.

Turns one upload into one stored, queryable post. The steps run in a
fixed order and each depends on the previous one succeeding:

1. validate owner and location
2. mint the post id (UUID4)
3. classify and upload media under that id (if any)
4. score the media (images only)
5. write the post document under that id

A failure at steps 3-5 aborts the upload with the step's error. A blob
already written at step 3 (or whose upload timed out and may have
landed) is not deleted; the orphan is logged with its object name so it
can be found and removed later.

The two writes are bounded by their clients' own timeouts and awaited
to completion, so a failed upload never leaves a post behind. Scoring
has no side effects and runs under a deadline.
"""

import asyncio
import uuid
from typing import BinaryIO, Optional

from around.core.config import settings
from around.core.errors import (
    AdapterError,
    BlobStoreError,
    ScoringError,
    ValidationError,
)
from around.core.logging import get_logger
from around.db.search import RecordStore
from around.schemas.post import ContentRecord, Location
from around.services.blob_store import BlobStore
from around.services.media import call_adapter, classify_media
from around.services.vision import FaceScorer

logger = get_logger(__name__)


def mint_post_id() -> str:
    return str(uuid.uuid4())


class IngestionPipeline:
    """
    Orchestrates blob store, face scorer and record store for one post.

    The adapters are shared, read-only handles; the pipeline itself keeps
    no per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        record_store: RecordStore,
        blob_store: BlobStore,
        scorer: FaceScorer,
        post_index: Optional[str] = None,
    ):
        self.record_store = record_store
        self.blob_store = blob_store
        self.scorer = scorer
        self.post_index = post_index or settings.POST_INDEX

    async def ingest(
        self,
        owner: str,
        text: str,
        location: Optional[Location],
        media: Optional[BinaryIO] = None,
        media_filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> ContentRecord:
        """
        Store ``media``, score it and persist the post.

        Args:
            owner: Verified username of the caller
            text: Message body, may be empty
            location: Where the post was made
            media: Readable binary stream, or None for a text-only post
            media_filename: Original filename; its extension picks the media kind
            content_type: MIME type forwarded to the blob store

        Returns:
            The persisted post, ``id`` set

        Raises:
            ValidationError: Missing owner or location
            BlobStoreError, ScoringError, RecordStoreError: Adapter failures
        """
        if not owner:
            raise ValidationError("Post owner is required")
        if location is None:
            raise ValidationError("Post location is required")

        post_id = mint_post_id()
        record = ContentRecord(
            id=post_id,
            owner=owner,
            text=text or "",
            location=location,
        )

        blob_written = False
        try:
            if media is not None:
                record.media_kind = classify_media(media_filename)
                record.media_locator = await asyncio.to_thread(
                    self.blob_store.write,
                    post_id,
                    media,
                    content_type,
                )
                blob_written = True

            if record.media_kind == "image":
                record.quality_score = await call_adapter(
                    self.scorer.score,
                    record.media_locator,
                    timeout=settings.SCORING_TIMEOUT_SECONDS,
                    error_cls=ScoringError,
                    step="face scoring",
                )

            await asyncio.to_thread(
                self.record_store.put,
                self.post_index,
                post_id,
                record.to_document(),
            )
        except AdapterError as e:
            if blob_written or (isinstance(e, BlobStoreError) and e.timed_out):
                logger.warning(
                    "orphaned_blob",
                    post_id=post_id,
                    bucket=self.blob_store.bucket,
                    error=str(e),
                )
            raise

        logger.info(
            "post_ingested",
            post_id=post_id,
            owner=owner,
            media_kind=record.media_kind,
            quality_score=record.quality_score,
        )
        return record
