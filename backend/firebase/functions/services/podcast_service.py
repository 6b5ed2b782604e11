# services/podcast_service.py
import uuid
from typing import List, Optional, Union

from models.podcast import Podcast, CreatePodcastRequest, PodcastUpdate
from models.user_info import Identity, UserInfo
from utils.database import Database, RecordNotFoundError
from utils.storage import Storage
from utils.logger import setup_logger

logger = setup_logger(__name__)

PodcastID = Union[uuid.UUID, str]

class UnauthenticatedError(Exception):
    """Raised when an operation needs a caller identity and none was given"""
    pass

class PodcastService:
    """Podcast lifecycle: create, read, update, view counting and delete.

    Writes are plain single-row patches. There is no compare-and-swap, so
    concurrent view increments can lose updates, and a delete that fails
    half way leaves orphaned assets or rows behind.
    """

    def __init__(self, database: Database, storage: Storage):
        self.database = database
        self.storage = storage

    def _require_user(self, identity: Optional[Identity]) -> UserInfo:
        if identity is None or not identity.email:
            raise UnauthenticatedError("User not authenticated")
        try:
            return self.database.get_user_by_email(identity.email)
        except RecordNotFoundError:
            raise RecordNotFoundError("User not found")

    def _require_podcast(self, podcast_id: PodcastID) -> Podcast:
        podcast = self.database.get_podcast(podcast_id)
        if podcast is None:
            raise RecordNotFoundError("Podcast not found")
        return podcast

    def create_podcast(self, identity: Optional[Identity], request: CreatePodcastRequest) -> Podcast:
        """Publish a podcast owned by the calling user.

        Raises:
            UnauthenticatedError: If there is no identity
            RecordNotFoundError: If no user matches the identity's email
        """
        user = self._require_user(identity)
        podcast = Podcast(
            user_id=user.id,
            author=user.name,
            author_id=user.clerk_id,
            author_image_url=user.image_url,
            **request.model_dump(),
        )
        return self.database.insert_podcast(podcast)

    def update_podcast(self, identity: Optional[Identity], podcast_id: PodcastID, update: PodcastUpdate) -> Podcast:
        """Overwrite the fields set on update, plus both storage references.

        Raises:
            UnauthenticatedError: If there is no identity
            RecordNotFoundError: If the podcast does not exist
        """
        if identity is None or not identity.email:
            raise UnauthenticatedError("User not authenticated")
        self._require_podcast(podcast_id)
        return self.database.update_podcast(podcast_id, update.changes())

    def increment_views(self, podcast_id: PodcastID) -> Podcast:
        """Add one view. Open to any caller.

        Raises:
            RecordNotFoundError: If the podcast does not exist
        """
        podcast = self._require_podcast(podcast_id)
        return self.database.update_podcast(podcast_id, {'views': podcast.views + 1})

    def delete_podcast(self, identity: Optional[Identity], podcast_id: PodcastID) -> bool:
        """Delete a podcast together with its image and audio assets.

        Raises:
            UnauthenticatedError: If there is no identity
            RecordNotFoundError: If the podcast does not exist
        """
        if identity is None or not identity.email:
            raise UnauthenticatedError("User not authenticated")
        podcast = self._require_podcast(podcast_id)

        self.storage.delete(podcast.image_storage_id)
        self.storage.delete(podcast.audio_storage_id)
        return self.database.delete_podcast(podcast_id)

    def get_podcast(self, podcast_id: PodcastID) -> Optional[Podcast]:
        return self.database.get_podcast(podcast_id)

    def get_all_podcasts(self) -> List[Podcast]:
        """Every podcast, newest first."""
        return self.database.get_all_podcasts(descending=True)

    def get_user_podcasts(self, identity: Optional[Identity]) -> List[Podcast]:
        """Podcasts owned by the calling user."""
        user = self._require_user(identity)
        logger.info(f"Fetching podcasts of user {user.id}")
        return self.database.get_podcasts_by_user(user.id)

    def get_similar_podcasts(self, podcast_id: PodcastID) -> List[Podcast]:
        """Other podcasts narrated with the same voice.

        An unknown podcast has no similar podcasts.
        """
        podcast = self.database.get_podcast(podcast_id)
        if podcast is None:
            return []
        return self.database.get_podcasts_by_voice_type(podcast.voice_type, exclude_id=podcast.id)

    def get_storage_url(self, storage_ref: str) -> str:
        """Public URL of an uploaded asset, called right after an upload."""
        return self.storage.get_url(storage_ref)
