import os

# Configuration is loaded on import, pin it before any project module loads
os.environ.setdefault('ENVIRONMENT', 'development')
os.environ.setdefault('STORAGE_BUCKET', 'test-bucket')

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from models.podcast import Podcast, PodcastCategory
from models.user_info import Identity, UserInfo
from utils.database import Database
from tests.fakes import InMemoryDatabase, InMemoryStorage

@pytest.fixture
def mock_supabase():
    """Create a mock Supabase client with all necessary method chains."""
    mock = MagicMock()
    # Setup method chaining
    mock.table.return_value = mock
    mock.select.return_value = mock
    mock.insert.return_value = mock
    mock.update.return_value = mock
    mock.delete.return_value = mock
    mock.eq.return_value = mock
    mock.neq.return_value = mock
    mock.ilike.return_value = mock
    mock.order.return_value = mock
    mock.limit.return_value = mock
    mock.rpc.return_value = mock
    mock.execute.return_value = MagicMock(data=[])
    return mock

@pytest.fixture
def respond(mock_supabase):
    """Make the next execute() calls return the given rows."""
    def _respond(*rows_per_call):
        responses = [MagicMock(data=list(rows)) for rows in rows_per_call]
        if len(responses) == 1:
            mock_supabase.execute.return_value = responses[0]
        else:
            mock_supabase.execute.side_effect = responses
    return _respond

@pytest.fixture
def db(mock_supabase):
    """Create a Database instance with mocked Supabase client."""
    with patch('utils.database.Database._get_client', return_value=mock_supabase):
        return Database()

@pytest.fixture
def sample_user():
    return UserInfo(
        id=uuid.UUID("11111111-2222-3333-4444-555555555555"),
        clerk_id="user_2abc",
        email="jane@example.com",
        name="Jane Doe",
        image_url="https://img.example.com/jane.png",
    )

@pytest.fixture
def identity(sample_user):
    return Identity(uid=sample_user.clerk_id, email=sample_user.email)

@pytest.fixture
def make_podcast(sample_user):
    """Factory for podcasts with increasing creation times."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    counter = {'n': 0}

    def _make(**overrides) -> Podcast:
        counter['n'] += 1
        n = counter['n']
        fields = dict(
            user_id=sample_user.id,
            podcast_title=f"Episode {n}",
            podcast_description=f"Description {n}",
            author=sample_user.name,
            author_id=sample_user.clerk_id,
            audio_url=f"https://cdn.example.com/audio-{n}.mp3",
            audio_storage_id=f"audio/{n}.mp3",
            image_url=f"https://cdn.example.com/image-{n}.png",
            image_storage_id=f"images/{n}.png",
            voice_type="alloy",
            voice_prompt=f"Prompt {n}",
            image_prompt="",
            category_type=PodcastCategory.TECHNOLOGY,
            views=0,
            audio_duration=120.0,
            created_at=base + timedelta(minutes=n),
        )
        fields.update(overrides)
        return Podcast(**fields)
    return _make

@pytest.fixture
def sample_podcast(make_podcast):
    return make_podcast(podcast_title="Test Podcast", views=5)

@pytest.fixture
def memory_db(sample_user):
    store = InMemoryDatabase()
    store.add_user(sample_user)
    return store

@pytest.fixture
def memory_storage():
    return InMemoryStorage()
