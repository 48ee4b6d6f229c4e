"""
Pydantic schemas for the pictogram catalogue payloads.

Field names are serialized in camelCase, the shape the gallery frontend
consumes (``lastModified``, ``galleryIds``...).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Contributor(CamelModel):
    github_username: str
    github_avatar_url: str = ""


class PictogramOut(CamelModel):
    """Pictogram as listed in the manifest."""

    id: str
    name: str
    filename: str
    url: str
    size: int
    last_modified: str
    tags: Optional[List[str]] = None
    gallery_ids: Optional[List[str]] = None
    contributor: Optional[Contributor] = None


class GalleryOut(CamelModel):
    """Gallery with the ids of its pictograms."""

    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    pictogram_ids: List[str] = Field(default_factory=list)
    created_at: str
    updated_at: str


class Manifest(CamelModel):
    pictograms: List[PictogramOut]
    last_updated: str
    total_count: int


class GalleriesFile(CamelModel):
    galleries: List[GalleryOut]
    last_updated: str
