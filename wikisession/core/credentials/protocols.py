"""
Credential storage protocols.

Defines the interface the coordinator uses to read and write saved
credentials. Storage engines live behind it.
"""
from typing import Protocol, runtime_checkable

from .models import Credentials, PresentCredentials


@runtime_checkable
class CredentialStore(Protocol):
    """
    Protocol for credential storage implementations.
    
    Implementations can use SQLite, a keyring, or any other backend.
    """
    
    def load(self) -> Credentials:
        """
        Load saved credentials.
        
        Returns:
            PresentCredentials, or AbsentCredentials (possibly with a host)
        """
        ...
    
    def save(self, credentials: PresentCredentials) -> None:
        """
        Save credentials, replacing any previous ones.
        
        Args:
            credentials: Credentials to save
        """
        ...
    
    def clear(self) -> None:
        """
        Forget username and password. The host is kept.
        """
        ...
    
    def exists(self) -> bool:
        """
        Check if a username/password pair is saved.
        
        Returns:
            True if credentials are present
        """
        ...
    
    def close(self) -> None:
        """
        Close storage connection and release resources.
        """
        ...
