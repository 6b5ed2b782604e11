# utils/storage.py
from typing import Optional

from utils.config import config
from utils.database import Database
from utils.logger import setup_logger

logger = setup_logger(__name__)

class StorageError(Exception):
    """Raised when the storage service rejects an operation"""
    pass

class Storage:
    """Binary asset storage (podcast audio and thumbnails) in a Supabase bucket.

    Storage references are object paths inside the bucket.
    """

    def __init__(self, database: Database, bucket: Optional[str] = None):
        self.bucket = bucket or config.storage_bucket
        self._bucket = database.client.storage.from_(self.bucket)

    def get_url(self, storage_ref: str) -> str:
        """Public URL of a stored asset."""
        try:
            url = self._bucket.get_public_url(storage_ref)
        except Exception as e:
            logger.error(f"Error resolving url for {storage_ref} in bucket {self.bucket}: {e}")
            raise StorageError(f"Error resolving url for {storage_ref}: {e}")
        return url

    def delete(self, storage_ref: str) -> bool:
        """Delete a stored asset.

        Returns:
            bool: True if the service reported the object as removed
        """
        logger.info(f"Deleting {storage_ref} from bucket {self.bucket}")
        try:
            removed = self._bucket.remove([storage_ref])
        except Exception as e:
            logger.error(f"Error deleting {storage_ref} from bucket {self.bucket}: {e}")
            raise StorageError(f"Error deleting {storage_ref}: {e}")
        return bool(removed)
