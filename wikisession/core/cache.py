"""Identity-dependent in-memory cache."""
from typing import Any, Dict, Optional


class MemoryCache:
    """
    Plain key/value cache that must be dropped when the user changes.
    
    Example:
        >>> cache = MemoryCache()
        >>> cache.set('watchlist', [...])
        >>> cache.clear()
    """
    
    def __init__(self):
        self._items: Dict[str, Any] = {}
    
    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._items.get(key, default)
    
    def set(self, key: str, value: Any) -> None:
        self._items[key] = value
    
    def clear(self) -> None:
        self._items.clear()
    
    def __len__(self) -> int:
        return len(self._items)
    
    def __contains__(self, key: str) -> bool:
        return key in self._items
