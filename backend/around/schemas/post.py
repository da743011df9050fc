"""
Post schemas.

A post (ContentRecord) is stored and returned with the short wire names
used by the post index mapping: ``user``, ``message``, ``location``,
``url``, ``type`` and ``face``. Python code uses the descriptive
attribute names.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat

MediaKind = Literal["", "image", "video", "unknown"]


class Location(BaseModel):
    """Latitude/longitude pair, stored as an OpenSearch geo_point."""

    lat: FiniteFloat = Field(..., ge=-90, le=90, examples=[37.7])
    lon: FiniteFloat = Field(..., ge=-180, le=180, examples=[-122.4])


class ContentRecord(BaseModel):
    """
    A geo-tagged post.

    ``id`` is the minted document id. It is also the blob object name,
    so it is not repeated inside the stored document.

    Example response item:
        {
            "id": "5b0e7c52-...",
            "user": "alice",
            "message": "hello",
            "location": {"lat": 37.7, "lon": -122.4},
            "url": "http://media.example.com/around-media/5b0e7c52-...",
            "type": "image",
            "face": 0.95
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    owner: str = Field(..., alias="user")
    text: str = Field(default="", alias="message")
    location: Location
    media_locator: str = Field(default="", alias="url")
    media_kind: MediaKind = Field(default="", alias="type")
    quality_score: float = Field(default=0.0, alias="face")

    def to_document(self) -> dict:
        """Body written to the post index."""
        return self.model_dump(by_alias=True, exclude={"id"})
