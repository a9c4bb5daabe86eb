"""
Credential models.

Saved credentials are a tagged value: either a complete
username/password pair (``PresentCredentials``) or nothing
(``AbsentCredentials``). Half-filled states cannot be built.
"""
from dataclasses import dataclass
from typing import Optional, Union
import json


@dataclass(frozen=True)
class PresentCredentials:
    """
    A complete set of saved credentials.
    
    Attributes:
        username: Server-normalized username
        password: Password
        host: Host the credentials were last used on (e.g. 'en.wikipedia.org')
    """
    username: str
    password: str
    host: Optional[str] = None
    
    def __post_init__(self):
        if not self.username or not self.password:
            raise ValueError("PresentCredentials needs a non-empty username and password")
    
    @property
    def is_present(self) -> bool:
        return True
    
    def without_secrets(self) -> 'AbsentCredentials':
        """Drop username and password, keep the host."""
        return AbsentCredentials(host=self.host)
    
    def __repr__(self) -> str:
        return f"PresentCredentials(username={self.username!r}, password=<hidden>, host={self.host!r})"


@dataclass(frozen=True)
class AbsentCredentials:
    """
    No saved username/password.
    
    The host of the last login may survive a logout so the same site is
    used next time.
    """
    host: Optional[str] = None
    
    @property
    def is_present(self) -> bool:
        return False
    
    def without_secrets(self) -> 'AbsentCredentials':
        return self


Credentials = Union[PresentCredentials, AbsentCredentials]


def credentials_from_fields(
    username: Optional[str],
    password: Optional[str],
    host: Optional[str] = None
) -> Credentials:
    """
    Build the tagged value from optional fields.
    
    A dangling username or password (or an empty one) means no credentials.
    """
    if username and password:
        return PresentCredentials(username=username, password=password, host=host or None)
    return AbsentCredentials(host=host or None)


def credentials_to_dict(credentials: Credentials) -> dict:
    """Convert to dictionary for serialization."""
    if isinstance(credentials, PresentCredentials):
        return {
            'username': credentials.username,
            'password': credentials.password,
            'host': credentials.host,
        }
    return {'username': None, 'password': None, 'host': credentials.host}


def credentials_from_dict(data: dict) -> Credentials:
    """Create from dictionary."""
    return credentials_from_fields(data.get('username'), data.get('password'), data.get('host'))


def credentials_to_json(credentials: Credentials) -> str:
    """Serialize to JSON string."""
    return json.dumps(credentials_to_dict(credentials))


def credentials_from_json(json_str: str) -> Credentials:
    """Create from JSON string."""
    return credentials_from_dict(json.loads(json_str))
