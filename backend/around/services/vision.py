"""
Quality scoring adapter over the Cloud Vision API.

The quality score of an image is the detection confidence of the first
face Cloud Vision finds in it. No face is a successful result with a
score of 0.0; API and transport failures raise ``ScoringError``.
"""

import logging
from typing import Optional

from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleAPIClientError
from httplib2 import HttpLib2Error

from around.core.config import settings
from around.core.errors import ScoringError

logger = logging.getLogger(__name__)


class FaceScorer:
    """
    Face-detection confidence for publicly readable images.

    Example:
        >>> scorer = FaceScorer()
        >>> scorer.score("http://media.example.com/around-media/5b0e7c52")
        0.95
    """

    def __init__(self, api_key: Optional[str] = None):
        """
        Args:
            api_key: Cloud Vision API key. If None, uses settings.VISION_API_KEY,
                     and Application Default Credentials when that is unset too.
        """
        self.api_key = api_key or settings.VISION_API_KEY
        self._vision = None
        self._initialize_client()

    def _initialize_client(self) -> None:
        try:
            self._vision = build(
                'vision',
                'v1',
                developerKey=self.api_key,
                cache_discovery=False,
            )
            logger.info("Cloud Vision client initialized")
        except Exception as e:
            logger.error(f"Failed to initialize Cloud Vision client: {e}")
            raise ScoringError(f"Failed to initialize Cloud Vision: {e}") from e

    def score(self, image_url: str) -> float:
        """
        Detect at most one face in the image at ``image_url``.

        Returns:
            Detection confidence in [0, 1]; 0.0 when no face is found

        Raises:
            ScoringError: The API call failed or returned an error
        """
        body = {
            'requests': [{
                'image': {'source': {'imageUri': image_url}},
                'features': [{'type': 'FACE_DETECTION', 'maxResults': 1}],
            }]
        }

        try:
            response = self._vision.images().annotate(body=body).execute()
        except (GoogleAPIClientError, HttpLib2Error, OSError) as e:
            raise ScoringError(f"Cloud Vision request failed: {e}") from e

        results = response.get('responses') or [{}]
        result = results[0]

        if 'error' in result:
            message = result['error'].get('message', 'unknown error')
            raise ScoringError(f"Cloud Vision error for {image_url}: {message}")

        faces = result.get('faceAnnotations') or []
        if not faces:
            logger.info(f"No faces found in {image_url}")
            return 0.0

        confidence = float(faces[0].get('detectionConfidence', 0.0))
        return min(max(confidence, 0.0), 1.0)


_face_scorer: Optional[FaceScorer] = None


def get_face_scorer() -> FaceScorer:
    """Get the shared scorer (created on first use)."""
    global _face_scorer

    if _face_scorer is None:
        _face_scorer = FaceScorer()

    return _face_scorer
