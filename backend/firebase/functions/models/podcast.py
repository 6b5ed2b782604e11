from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from typing import List, Optional
import uuid


class PodcastCategory(str, Enum):
    """Topical label attached to every podcast.

    Values are stored in their capitalized display form. Lookup is
    case-insensitive, so ``PodcastCategory("mental health")`` and
    ``PodcastCategory("MENTAL HEALTH")`` resolve to the same member.
    """
    BUSINESS = 'Business'
    TECHNOLOGY = 'Technology'
    COMEDY = 'Comedy'
    EDUCATION = 'Education'
    HOBBIES = 'Hobbies'
    GOVERNMENT = 'Government'
    MENTAL_HEALTH = 'Mental health'
    FAMILY = 'Family'
    MUSIC = 'Music'
    POLITICS = 'Politics'
    SPIRITUALITY = 'Spirituality'
    CULTURE = 'Culture'
    ARTS = 'Arts'

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value.lower() == normalized:
                    return member
        return None

    @property
    def label(self) -> str:
        """Lowercase label, as used in URLs and client queries."""
        return self.value.lower()

    @property
    def display_name(self) -> str:
        return self.value


class Podcast(BaseModel):
    """Podcast record as stored in the ``podcasts`` table."""

    model_config = ConfigDict(
        from_attributes=True
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        description="Unique identifier for the podcast",
        json_schema_extra={"unique": True}
    )
    user_id: uuid.UUID = Field(..., description="ID of the user owning the podcast")
    podcast_title: str = Field(..., description="Title of the podcast")
    podcast_description: str = Field(..., description="Description of the podcast")
    author: str = Field(..., description="Display name of the author")
    author_id: str = Field(..., description="External auth identifier of the author")
    author_image_url: Optional[str] = Field(None, description="Avatar URL of the author")
    audio_url: Optional[str] = Field(None, description="Public URL of the audio asset")
    audio_storage_id: str = Field(..., description="Storage reference of the audio asset")
    image_url: Optional[str] = Field(None, description="Public URL of the thumbnail")
    image_storage_id: str = Field(..., description="Storage reference of the thumbnail")
    voice_type: str = Field(..., description="Voice used for speech synthesis")
    voice_prompt: str = Field(..., description="Text the audio was synthesized from")
    image_prompt: str = Field("", description="Prompt the thumbnail was generated from")
    category_type: PodcastCategory = Field(..., description="Category label of the podcast")
    views: int = Field(0, ge=0, description="Number of times the podcast was played")
    audio_duration: float = Field(0, ge=0, description="Audio duration in seconds")
    created_at: datetime = Field(default_factory=datetime.now, description="Timestamp of podcast creation")


class CreatePodcastRequest(BaseModel):
    """Fields supplied by the owner when publishing a podcast.

    Author fields and the owning user are filled in from the caller's
    identity, never from the request.
    """
    podcast_title: str = Field(..., min_length=1)
    podcast_description: str = Field(..., min_length=1)
    audio_url: str
    audio_storage_id: str
    image_url: str
    image_storage_id: str
    voice_type: str
    voice_prompt: str
    image_prompt: str = ""
    category_type: PodcastCategory
    views: int = Field(0, ge=0)
    audio_duration: float = Field(0, ge=0)


class PodcastUpdate(BaseModel):
    """Partial update of a podcast.

    Only the fields the caller explicitly sets are written, so ``0`` and
    ``""`` are valid values. Storage references are required and are always
    overwritten.
    """
    podcast_title: Optional[str] = None
    podcast_description: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    voice_prompt: Optional[str] = None
    image_prompt: Optional[str] = None
    voice_type: Optional[str] = None
    category_type: Optional[PodcastCategory] = None
    views: Optional[int] = Field(None, ge=0)
    audio_duration: Optional[float] = Field(None, ge=0)
    audio_storage_id: str
    image_storage_id: str

    @field_validator(
        'podcast_title', 'podcast_description', 'voice_prompt', 'image_prompt',
        'voice_type', 'category_type', 'views', 'audio_duration',
    )
    def reject_explicit_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} cannot be set to null')
        return v

    def changes(self) -> dict:
        """Fields to write, keyed by column name."""
        data = self.model_dump(exclude_unset=True, mode='json')
        data['audio_storage_id'] = self.audio_storage_id
        data['image_storage_id'] = self.image_storage_id
        return data


class AuthorPodcasts(BaseModel):
    """Podcasts of one author together with their summed views."""
    podcasts: List[Podcast] = Field(default_factory=list)
    listeners: int = Field(0, ge=0, description="Sum of views across the author's podcasts")
