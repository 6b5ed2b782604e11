import uuid
import pytest
from unittest.mock import MagicMock

from models.podcast import CreatePodcastRequest, PodcastCategory, PodcastUpdate
from models.user_info import Identity
from services.podcast_service import PodcastService, UnauthenticatedError
from utils.database import RecordNotFoundError
from tests.fakes import InMemoryStorage

@pytest.fixture
def service(memory_db, memory_storage):
    return PodcastService(memory_db, memory_storage)

@pytest.fixture
def create_request():
    return CreatePodcastRequest(
        podcast_title="Deep Dive",
        podcast_description="All about databases",
        audio_url="https://cdn.example.com/a.mp3",
        audio_storage_id="audio/a.mp3",
        image_url="https://cdn.example.com/i.png",
        image_storage_id="images/i.png",
        voice_type="alloy",
        voice_prompt="Welcome to the show",
        image_prompt="a database",
        category_type="technology",
        views=0,
        audio_duration=312.5,
    )

class TestCreatePodcast:
    def test_stamps_owner_and_author(self, service, memory_db, identity, sample_user, create_request):
        podcast = service.create_podcast(identity, create_request)

        stored = memory_db.get_podcast(podcast.id)
        assert stored.user_id == sample_user.id
        assert stored.author == sample_user.name
        assert stored.author_id == sample_user.clerk_id
        assert stored.author_image_url == sample_user.image_url
        assert stored.category_type is PodcastCategory.TECHNOLOGY
        assert stored.audio_duration == 312.5

    def test_requires_identity(self, service, create_request):
        with pytest.raises(UnauthenticatedError):
            service.create_podcast(None, create_request)

    def test_identity_without_email(self, service, create_request):
        with pytest.raises(UnauthenticatedError):
            service.create_podcast(Identity(uid="u1"), create_request)

    def test_unknown_user(self, service, create_request):
        with pytest.raises(RecordNotFoundError, match="User not found"):
            service.create_podcast(Identity(uid="u2", email="ghost@example.com"), create_request)

class TestUpdatePodcast:
    def test_writes_explicit_fields_only(self, service, memory_db, identity, make_podcast):
        podcast = memory_db.insert_podcast(make_podcast(views=9, podcast_title="Old"))

        update = PodcastUpdate(views=0, audio_storage_id="audio/new.mp3", image_storage_id="images/new.png")
        updated = service.update_podcast(identity, podcast.id, update)

        assert updated.views == 0
        assert updated.podcast_title == "Old"
        assert updated.audio_storage_id == "audio/new.mp3"
        assert updated.image_storage_id == "images/new.png"

    def test_requires_identity(self, service, memory_db, make_podcast):
        podcast = memory_db.insert_podcast(make_podcast())
        update = PodcastUpdate(audio_storage_id="a", image_storage_id="i")
        with pytest.raises(UnauthenticatedError):
            service.update_podcast(None, podcast.id, update)

    def test_missing_podcast(self, service, identity):
        update = PodcastUpdate(audio_storage_id="a", image_storage_id="i")
        with pytest.raises(RecordNotFoundError, match="Podcast not found"):
            service.update_podcast(identity, uuid.uuid4(), update)

class TestIncrementViews:
    def test_adds_one_view(self, service, memory_db, make_podcast):
        podcast = memory_db.insert_podcast(make_podcast(views=5))

        service.increment_views(podcast.id)
        assert memory_db.get_podcast(podcast.id).views == 6

    def test_no_identity_needed(self, service, memory_db, make_podcast):
        podcast = memory_db.insert_podcast(make_podcast(views=0))
        assert service.increment_views(podcast.id).views == 1

    def test_missing_podcast(self, service):
        with pytest.raises(RecordNotFoundError):
            service.increment_views(uuid.uuid4())

class TestDeletePodcast:
    def test_removes_assets_and_record(self, memory_db, identity, make_podcast):
        podcast = memory_db.insert_podcast(make_podcast())
        storage_objects = {podcast.image_storage_id, podcast.audio_storage_id}
        storage = InMemoryStorage(storage_objects)
        service = PodcastService(memory_db, storage)

        assert service.delete_podcast(identity, podcast.id) is True
        assert storage.objects == set()
        assert storage.deleted == [podcast.image_storage_id, podcast.audio_storage_id]
        assert service.get_podcast(podcast.id) is None

    def test_missing_podcast_touches_nothing(self, service, memory_storage, identity):
        with pytest.raises(RecordNotFoundError):
            service.delete_podcast(identity, uuid.uuid4())
        assert memory_storage.deleted == []

    def test_requires_identity(self, service, memory_db, memory_storage, make_podcast):
        podcast = memory_db.insert_podcast(make_podcast())
        with pytest.raises(UnauthenticatedError):
            service.delete_podcast(None, podcast.id)
        assert memory_db.get_podcast(podcast.id) is not None
        assert memory_storage.deleted == []

    def test_storage_failure_leaves_record(self, memory_db, identity, make_podcast):
        podcast = memory_db.insert_podcast(make_podcast())
        storage = MagicMock()
        storage.delete.side_effect = [True, RuntimeError("storage unavailable")]
        service = PodcastService(memory_db, storage)

        with pytest.raises(RuntimeError):
            service.delete_podcast(identity, podcast.id)
        assert memory_db.get_podcast(podcast.id) is not None

class TestQueries:
    def test_get_all_podcasts_newest_first(self, service, memory_db, make_podcast):
        first = memory_db.insert_podcast(make_podcast())
        second = memory_db.insert_podcast(make_podcast())
        assert [p.id for p in service.get_all_podcasts()] == [second.id, first.id]

    def test_get_user_podcasts(self, service, memory_db, identity, make_podcast):
        mine = memory_db.insert_podcast(make_podcast())
        memory_db.insert_podcast(make_podcast(user_id=uuid.uuid4()))

        assert [p.id for p in service.get_user_podcasts(identity)] == [mine.id]

    def test_get_user_podcasts_requires_identity(self, service):
        with pytest.raises(UnauthenticatedError):
            service.get_user_podcasts(None)

    def test_similar_podcasts_share_voice_and_exclude_self(self, service, memory_db, make_podcast):
        podcast = memory_db.insert_podcast(make_podcast(voice_type="echo"))
        same_voice = memory_db.insert_podcast(make_podcast(voice_type="echo"))
        memory_db.insert_podcast(make_podcast(voice_type="nova"))

        assert [p.id for p in service.get_similar_podcasts(podcast.id)] == [same_voice.id]

    def test_similar_podcasts_of_unknown_podcast(self, service):
        assert service.get_similar_podcasts(uuid.uuid4()) == []

    def test_get_storage_url(self, service):
        assert service.get_storage_url("audio/a.mp3") == "https://storage.example.com/audio/a.mp3"
