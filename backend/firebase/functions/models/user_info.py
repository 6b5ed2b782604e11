from pydantic import BaseModel, Field, EmailStr, ConfigDict
from datetime import datetime
from typing import Any, Mapping, Optional
import uuid


class UserInfo(BaseModel):
    """User information model."""

    model_config = ConfigDict(
        from_attributes=True  # Replaces the deprecated Config class
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, description="Unique identifier for the user")
    clerk_id: str = Field(..., description="External auth provider identifier", min_length=1, max_length=255)
    email: EmailStr = Field(..., description="User's email address")
    name: str = Field(..., description="User's display name", max_length=255)
    image_url: Optional[str] = Field(None, description="Avatar image URL")
    created_at: datetime = Field(default_factory=datetime.now, description="Timestamp of user creation")


class Identity(BaseModel):
    """Authenticated caller, as asserted by the auth provider."""
    uid: str
    email: Optional[str] = None

    @classmethod
    def from_auth(cls, auth: Any) -> Optional["Identity"]:
        """Build an identity from a callable request's auth context.

        Returns None when there is no auth context or it carries no email
        claim.
        """
        if auth is None:
            return None
        token: Mapping[str, Any] = getattr(auth, 'token', None) or {}
        email = token.get('email')
        if not email:
            return None
        return cls(uid=auth.uid, email=email)
