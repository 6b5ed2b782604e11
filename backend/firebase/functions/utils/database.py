# utils/database.py
import supabase
from utils.config import config
from utils.logger import setup_logger
from models.user_info import UserInfo
from models.podcast import Podcast, PodcastCategory
from typing import List, Optional, Dict, Any, TypeVar, Callable, Union
import uuid
from datetime import datetime, timezone, timedelta
from enum import Enum
from pydantic import BaseModel
from functools import lru_cache, wraps
from collections import deque
import threading
import time

logger = setup_logger(__name__)

class DatabaseError(Exception):
    """Base exception for database operations"""
    pass

class RecordNotFoundError(DatabaseError):
    """Raised when a record is not found"""
    pass

class DuplicateRecordError(DatabaseError):
    """Raised when trying to insert a duplicate record"""
    pass

T = TypeVar('T')

PODCASTS = 'podcasts'
USERS = 'users'

# Slow queries kept for get_query_stats
SLOW_QUERY_HISTORY = 100

class Cache:
    """Simple in-memory cache with TTL support."""

    def __init__(self):
        self._cache: Dict[str, Any] = {}
        self._ttls: Dict[str, datetime] = {}

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired."""
        if key not in self._cache:
            return None

        if self._ttls[key] < datetime.now():
            del self._cache[key]
            del self._ttls[key]
            return None

        return self._cache[key]

    def set(self, key: str, value: Any, ttl: timedelta):
        """Set value in cache with TTL."""
        self._cache[key] = value
        self._ttls[key] = datetime.now() + ttl

    def invalidate(self, prefix: str) -> None:
        """Drop every entry whose key starts with prefix."""
        for key in [k for k in self._cache if k.startswith(prefix)]:
            del self._cache[key]
            del self._ttls[key]

class Database:
    """Record store adapter over the ``podcasts`` and ``users`` tables.

    Every method maps to a single PostgREST request, so each call is atomic
    at the granularity of the rows it touches; there are no multi-record
    transactions.

    Features:
        - Cached Supabase client
        - Query performance monitoring and logging
        - In-memory caching with TTL for user lookups
        - Full-text search bounded by an explicit result cap

    Examples:
        >>> db = Database()
        >>> podcast = db.get_podcast(podcast_id)
        >>> hits = db.search_podcasts('author', 'jane', limit=10)
        >>> stats = db.get_query_stats()
        >>> print(f"Average query time: {stats['avg_duration']:.3f}s")
    """

    @staticmethod
    @lru_cache(maxsize=1)
    def _get_client():
        """Get or create a cached Supabase client instance."""
        key = config.supabase_service_key or config.supabase_anon_key
        return supabase.create_client(config.supabase_url, key)

    def __init__(self):
        """Initialize database connection and caching."""
        self.client = self._get_client()
        self._query_stats = {
            'total_queries': 0,
            'total_duration': 0.0,
            'slow_queries': deque(maxlen=SLOW_QUERY_HISTORY),
        }
        self._cache = Cache()
        # Category fan-out runs queries from worker threads
        self._stats_lock = threading.Lock()

    def _handle_error(self, error: Exception, operation: str) -> None:
        """Centralized error handling for database operations.

        Raises:
            DuplicateRecordError: For duplicate key violations
            RecordNotFoundError: For missing records
            DatabaseError: For everything else
        """
        error_str = str(error)

        if 'duplicate key value violates unique constraint' in error_str:
            raise DuplicateRecordError(f"Duplicate record in {operation}: {error_str}")
        elif 'record not found' in error_str:
            raise RecordNotFoundError(f"Record not found in {operation}: {error_str}")
        else:
            logger.error(f"Database error in {operation}: {error_str}")
            raise DatabaseError(f"Error in {operation}: {error_str}")

    def _serialize_model(self, model: BaseModel) -> dict:
        """Serialize model data for database operations."""
        return self._serialize_update_data(model.model_dump())

    def _serialize_update_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Serialize dictionary data for database writes.

        Converts datetimes to ISO strings, UUIDs to strings and enums to
        their values. Nested dictionaries are handled recursively.
        """
        serialized = {}
        for key, value in data.items():
            if isinstance(value, datetime):
                serialized[key] = value.isoformat()
            elif isinstance(value, uuid.UUID):
                serialized[key] = str(value)
            elif isinstance(value, Enum):
                serialized[key] = value.value
            elif isinstance(value, dict):
                serialized[key] = self._serialize_update_data(value)
            else:
                serialized[key] = value
        return serialized

    def _cache_key(self, prefix: str, *args) -> str:
        """Generate cache key from prefix and arguments."""
        return f"{prefix}:{':'.join(str(arg) for arg in args)}"

    def _cached_query(
        self,
        cache_key: str,
        query_func: Callable[[], T],
        ttl: timedelta = timedelta(minutes=5)
    ) -> T:
        """Execute query with caching.

        Args:
            cache_key: Key for caching result
            query_func: Function to execute if cache miss
            ttl: Time-to-live for cached result
        """
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        result = query_func()
        self._cache.set(cache_key, result, ttl)
        return result

    def _monitor_query(func):
        """Decorator to monitor query execution time and collect stats."""
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.perf_counter()
            try:
                return func(self, *args, **kwargs)
            finally:
                duration = time.perf_counter() - start_time
                with self._stats_lock:
                    self._query_stats['total_queries'] += 1
                    self._query_stats['total_duration'] += duration

                    # Track slow queries (over 1 second)
                    if duration >= 1.0:
                        self._query_stats['slow_queries'].append({
                            'query': func.__name__,
                            'duration': duration,
                            'timestamp': datetime.now(timezone.utc)
                        })
                if duration >= 1.0:
                    logger.warning(f"Slow query detected - Operation: {func.__name__}, Duration: {duration:.3f}s")
        return wrapper

    def _to_podcasts(self, rows: List[Dict[str, Any]]) -> List[Podcast]:
        return [Podcast(**row) for row in rows]

    #- Podcast Operations
    @_monitor_query
    def get_podcast(self, podcast_id: Union[uuid.UUID, str]) -> Optional[Podcast]:
        """Get a podcast by ID.

        Returns:
            Optional[Podcast]: The podcast, or None if there is no such row

        Raises:
            DatabaseError: If there's an error querying the database
        """
        try:
            response = self.client.table(PODCASTS).select('*').eq('id', str(podcast_id)).execute()
        except Exception as e:
            self._handle_error(e, f"get_podcast(podcast_id={podcast_id})")
        if not response.data:
            logger.info(f"Podcast with id {podcast_id} was not found in the database")
            return None
        return Podcast(**response.data[0])

    @_monitor_query
    def insert_podcast(self, podcast: Podcast) -> Podcast:
        """Insert a podcast and return the stored row.

        Raises:
            DuplicateRecordError: If a podcast with the same id exists
            DatabaseError: If there's an error inserting the podcast
        """
        logger.info(f"Inserting podcast '{podcast.podcast_title}' for user {podcast.user_id}")
        try:
            response = self.client.table(PODCASTS).insert(self._serialize_model(podcast)).execute()
        except Exception as e:
            self._handle_error(e, "insert_podcast")
        return Podcast(**response.data[0])

    @_monitor_query
    def update_podcast(self, podcast_id: Union[uuid.UUID, str], updated_data: Dict[str, Any]) -> Podcast:
        """Patch the given columns of a podcast.

        Args:
            podcast_id: ID of the podcast to update
            updated_data: Columns to overwrite; columns not listed are kept

        Raises:
            RecordNotFoundError: If the podcast does not exist
            DatabaseError: If there's an error updating the podcast
        """
        serialized_data = self._serialize_update_data(updated_data)
        logger.info(f"Updating podcast with id: {podcast_id}, with data: {serialized_data}")
        try:
            response = self.client.table(PODCASTS).update(serialized_data).eq('id', str(podcast_id)).execute()
        except Exception as e:
            self._handle_error(e, f"update_podcast(podcast_id={podcast_id})")
        if not response.data:
            raise RecordNotFoundError(f"Podcast with id {podcast_id} not found")
        return Podcast(**response.data[0])

    @_monitor_query
    def delete_podcast(self, podcast_id: Union[uuid.UUID, str]) -> bool:
        """Delete a podcast row. Returns True when a row was removed."""
        logger.info(f"Deleting podcast with id: {podcast_id}")
        try:
            response = self.client.table(PODCASTS).delete().eq('id', str(podcast_id)).execute()
        except Exception as e:
            self._handle_error(e, f"delete_podcast(podcast_id={podcast_id})")
        return bool(response.data)

    @_monitor_query
    def get_all_podcasts(self, descending: bool = True) -> List[Podcast]:
        """Get every podcast ordered by creation time (newest first by default)."""
        try:
            response = self.client.table(PODCASTS).select('*').order('created_at', desc=descending).execute()
        except Exception as e:
            self._handle_error(e, "get_all_podcasts")
        return self._to_podcasts(response.data)

    @_monitor_query
    def filter_podcasts(self, column: str, value: Any) -> List[Podcast]:
        """Get podcasts whose column equals value, in creation order."""
        if isinstance(value, (uuid.UUID, Enum)):
            value = self._serialize_update_data({column: value})[column]
        try:
            response = self.client.table(PODCASTS)\
                .select('*')\
                .eq(column, value)\
                .order('created_at')\
                .execute()
        except Exception as e:
            self._handle_error(e, f"filter_podcasts({column}={value})")
        return self._to_podcasts(response.data)

    @_monitor_query
    def get_podcasts_by_category(self, category: PodcastCategory) -> List[Podcast]:
        """Get podcasts of one category.

        The comparison is case-insensitive so rows written with a lowercase
        label still match.
        """
        try:
            response = self.client.table(PODCASTS)\
                .select('*')\
                .ilike('category_type', category.value)\
                .order('created_at')\
                .execute()
        except Exception as e:
            self._handle_error(e, f"get_podcasts_by_category({category.value})")
        return self._to_podcasts(response.data)

    def get_podcasts_by_author(self, author_id: str) -> List[Podcast]:
        return self.filter_podcasts('author_id', author_id)

    def get_podcasts_by_user(self, user_id: Union[uuid.UUID, str]) -> List[Podcast]:
        return self.filter_podcasts('user_id', str(user_id))

    @_monitor_query
    def get_podcasts_by_voice_type(self, voice_type: str, exclude_id: Union[uuid.UUID, str]) -> List[Podcast]:
        """Get podcasts sharing a voice type, excluding the given podcast."""
        try:
            response = self.client.table(PODCASTS)\
                .select('*')\
                .eq('voice_type', voice_type)\
                .neq('id', str(exclude_id))\
                .execute()
        except Exception as e:
            self._handle_error(e, f"get_podcasts_by_voice_type({voice_type})")
        return self._to_podcasts(response.data)

    @_monitor_query
    def search_podcasts(self, column: str, term: str, limit: int = 10) -> List[Podcast]:
        """Full-text search over one column, most relevant first.

        Runs the ``search_podcasts`` Postgres function, which ranks matches
        with ``ts_rank`` and keeps the top ``limit`` rows.

        Args:
            column: Column with a full-text index (author, podcast_title, podcast_description)
            term: User supplied search term, parsed as a web search query
            limit: Maximum number of hits

        Returns:
            List[Podcast]: Matches ordered by descending relevance
        """
        params = {'search_column': column, 'search_term': term, 'result_limit': limit}
        try:
            response = self.client.rpc('search_podcasts', params).execute()
        except Exception as e:
            self._handle_error(e, f"search_podcasts({column}={term!r})")
        return self._to_podcasts(response.data)

    #- User Operations
    def _get_user_by(self, column: str, value: Any) -> UserInfo:
        try:
            response = self.client.table(USERS).select('*').eq(column, str(value)).execute()
        except Exception as e:
            self._handle_error(e, f"get_user({column}={value})")
        if not response.data:
            logger.warning(f"User with {column} {value} was not found in the database")
            raise RecordNotFoundError(f"User with {column} {value} not found")
        return UserInfo(**response.data[0])

    @_monitor_query
    def get_user(self, user_id: Union[uuid.UUID, str]) -> UserInfo:
        """Get user by ID.

        Raises:
            RecordNotFoundError: If user is not found
            DatabaseError: If there's an error querying the database
        """
        return self._get_user_by('id', user_id)

    @_monitor_query
    def get_user_by_email(self, email: str, use_cache: bool = True) -> UserInfo:
        """Get user by email address, the claim the auth provider asserts.

        Results are cached for five minutes unless use_cache is False.

        Raises:
            RecordNotFoundError: If user is not found
            DatabaseError: If there's an error querying the database
        """
        def query_func():
            return self._get_user_by('email', email)

        if not use_cache:
            return query_func()

        return self._cached_query(self._cache_key('user', 'email', email), query_func)

    @_monitor_query
    def get_user_by_clerk_id(self, clerk_id: str) -> UserInfo:
        return self._get_user_by('clerk_id', clerk_id)

    def insert_user(self, user: UserInfo) -> UserInfo:
        """Insert a new user into the database.

        Raises:
            DuplicateRecordError: If user with same email already exists
            DatabaseError: If there's an error inserting the user
        """
        logger.info(f"Inserting user in DB: {user.email}")
        try:
            response = self.client.table(USERS).insert(self._serialize_model(user)).execute()
            return UserInfo(**response.data[0])
        except Exception as e:
            error_msg = str(e)
            if 'duplicate key value violates unique constraint' in error_msg:
                logger.error(f"Duplicate user error: {error_msg}")
                raise DuplicateRecordError(f"User with email {user.email} already exists")
            logger.error(f"Error inserting user: {error_msg}")
            raise DatabaseError(f"Error inserting user: {error_msg}")

    def update_user(self, user_id: Union[uuid.UUID, str], updated_data: Dict[str, Any]) -> UserInfo:
        """Update user information.

        Raises:
            RecordNotFoundError: If user is not found
            DatabaseError: If there's an error updating the user
        """
        serialized_data = self._serialize_update_data(updated_data)
        logger.info(f"Updating user with id: {user_id}, with data: {serialized_data}")
        try:
            response = self.client.table(USERS).update(serialized_data).eq('id', str(user_id)).execute()
        except Exception as e:
            logger.error(f"Error updating user: {str(e)}")
            raise DatabaseError(f"Error updating user: {str(e)}")
        if not response.data:
            raise RecordNotFoundError(f"User with id {user_id} not found")
        self._cache.invalidate('user:')
        return UserInfo(**response.data[0])

    def get_query_stats(self) -> Dict[str, Any]:
        """Get query performance statistics."""
        with self._stats_lock:
            total = self._query_stats['total_queries']
            return {
                'total_queries': total,
                'total_duration': self._query_stats['total_duration'],
                'avg_duration': self._query_stats['total_duration'] / total if total else 0.0,
                'slow_queries': list(self._query_stats['slow_queries']),
            }
