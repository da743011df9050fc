"""
Post endpoints.

- POST /post     upload a geo-tagged post with an image or video
- GET  /search   posts within a radius of a point
- GET  /cluster  posts whose score field is at least 0.9

All three require a bearer token; the post owner is always the token's
username.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from around.api.deps import get_ingestion_pipeline, get_post_query_service
from around.core.auth import get_current_username
from around.core.errors import ValidationError
from around.core.logging import get_logger
from around.schemas.post import ContentRecord
from around.services.ingestion import IngestionPipeline
from around.services.post_query import PostQueryService, parse_location

logger = get_logger(__name__)

router = APIRouter(tags=["posts"])


@router.post("/post", status_code=status.HTTP_200_OK)
async def create_post(
    username: str = Depends(get_current_username),
    lat: Optional[str] = Form(None),
    lon: Optional[str] = Form(None),
    message: str = Form(""),
    image: Optional[UploadFile] = File(None),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
) -> Response:
    """
    Upload a post.

    Request Format:
    ---------------
    Content-Type: multipart/form-data

    lat=37.7, lon=-122.4, message="hello", image=<a.jpg>

    Returns an empty 200 once the media is stored, scored and the post
    is indexed.

    Raises:
        400: Image part missing or coordinates invalid
        500: Media upload, face scoring or post write failed
    """
    logger.info("post_received", username=username)

    if image is None:
        raise ValidationError("Image is not available")

    location = parse_location(lat, lon)

    try:
        await pipeline.ingest(
            owner=username,
            text=message,
            location=location,
            media=image.file,
            media_filename=image.filename,
            content_type=image.content_type,
        )
    finally:
        await image.close()

    return Response(status_code=status.HTTP_200_OK)


@router.get("/search", response_model=List[ContentRecord])
async def search_posts(
    username: str = Depends(get_current_username),
    lat: Optional[str] = Query(None, description="Center latitude"),
    lon: Optional[str] = Query(None, description="Center longitude"),
    distance: Optional[str] = Query(None, alias="range", description="Radius in km (default 200)"),
    service: PostQueryService = Depends(get_post_query_service),
) -> List[ContentRecord]:
    """
    Posts within ``range`` kilometers of (lat, lon).

    Example:
        GET /search?lat=37.7&lon=-122.4&range=50
    """
    return await service.search_nearby(lat, lon, distance)


@router.get("/cluster", response_model=List[ContentRecord])
async def cluster_posts(
    username: str = Depends(get_current_username),
    term: Optional[str] = Query(None, description="Score field, e.g. face"),
    service: PostQueryService = Depends(get_post_query_service),
) -> List[ContentRecord]:
    """
    Posts whose ``term`` field is at least 0.9.

    Example:
        GET /cluster?term=face
    """
    return await service.search_threshold(term)
