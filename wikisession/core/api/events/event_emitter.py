"""Event emitter implementation using Observer Pattern."""
from typing import Dict, List, Callable, Optional

from ...logging import get_logger


class EventEmitter:
    """Event emitter using Observer Pattern."""
    
    def __init__(self, logger_name: str = "wikisession.events"):
        """Initializes event emitter."""
        self._events: Dict[str, List[Callable]] = {}
        self._logger = get_logger(logger_name)
    
    def on(self, event: str, callback: Callable) -> 'EventEmitter':
        """Registers an event handler."""
        if event not in self._events:
            self._events[event] = []
        self._events[event].append(callback)
        return self
    
    def emit(self, event: str, *args, **kwargs):
        """Emits an event to handlers in registration order."""
        if event in self._events:
            self._logger.debug(f"Emitting '{event}' to {len(self._events[event])} handler(s)")
            for callback in list(self._events[event]):
                callback(*args, **kwargs)
    
    def off(self, event: str, callback: Optional[Callable] = None) -> 'EventEmitter':
        """Removes an event handler."""
        if event not in self._events:
            return self
        
        if callback is None:
            del self._events[event]
        else:
            self._events[event] = [cb for cb in self._events[event] if cb != callback]
        
        return self
    
    def listener_count(self, event: str) -> int:
        """Number of handlers registered for an event."""
        return len(self._events.get(event, []))
