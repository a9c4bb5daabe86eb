"""
In-memory session state.

Holds the logged-in username for one coordinator and publishes every
change of the logged-in flag to registered observers.
"""
from typing import List, Optional

from .protocols import LoginStateObserver
from .logging import get_logger

logger = get_logger('wikisession.state')


class SessionState:
    """
    Logged-in username with explicit change publication.
    
    ``is_logged_in`` is true iff ``username`` is set. Observers are called
    synchronously, in registration order, after the new value is stored.
    """
    
    def __init__(self):
        self._username: Optional[str] = None
        self._observers: List[LoginStateObserver] = []
    
    @property
    def username(self) -> Optional[str]:
        return self._username
    
    @property
    def is_logged_in(self) -> bool:
        return self._username is not None
    
    def add_observer(self, observer: LoginStateObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)
    
    def remove_observer(self, observer: LoginStateObserver) -> None:
        self._observers = [o for o in self._observers if o != observer]
    
    def set_username(self, username: Optional[str]) -> None:
        """Store a new username (None logs out) and publish flag changes."""
        was_logged_in = self.is_logged_in
        self._username = username or None
        
        if was_logged_in != self.is_logged_in:
            logger.debug(f"Login state changed: logged_in={self.is_logged_in}")
            self._publish()
    
    def clear(self) -> None:
        self.set_username(None)
    
    def _publish(self) -> None:
        for observer in list(self._observers):
            observer(self.is_logged_in)
