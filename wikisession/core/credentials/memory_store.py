"""
In-memory credential storage implementation.

Provides non-persistent credential storage for testing and temporary use.
"""
from .protocols import CredentialStore
from .models import Credentials, PresentCredentials, AbsentCredentials


class MemoryCredentialStore(CredentialStore):
    """
    In-memory credential storage.
    
    Data is lost when the object is destroyed.
    
    Example:
        >>> store = MemoryCredentialStore()
        >>> store.save(PresentCredentials('Alice', 'secret', 'en.wikipedia.org'))
        >>> store.load().username
        'Alice'
    """
    
    def __init__(self, credentials: Credentials = AbsentCredentials()):
        """Initialize memory credential storage."""
        self._credentials: Credentials = credentials
    
    def load(self) -> Credentials:
        return self._credentials
    
    def save(self, credentials: PresentCredentials) -> None:
        self._credentials = credentials
    
    def clear(self) -> None:
        self._credentials = self._credentials.without_secrets()
    
    def exists(self) -> bool:
        return self._credentials.is_present
    
    def close(self) -> None:
        """Close storage (no-op for memory storage)."""
        pass
    
    def __enter__(self) -> 'MemoryCredentialStore':
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
