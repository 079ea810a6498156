"""
User, session and profile data models for the authentication service.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class UserSession:
    """Supabase auth session, as kept in Streamlit session state"""
    user_id: str
    email: str
    access_token: str
    refresh_token: str
    expires_at: Optional[datetime] = None

    @classmethod
    def from_supabase(cls, session: Any) -> 'UserSession':
        expires_at = None
        if getattr(session, "expires_at", None):
            expires_at = datetime.fromtimestamp(session.expires_at)
        return cls(
            user_id=session.user.id,
            email=session.user.email or "",
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=expires_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


@dataclass
class UserProfile:
    """Display data from the profiles table"""
    first_name: str
    last_name: str
    email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()
