"""In-memory boolean preferences."""
from typing import Dict

from .protocols import Preferences

# Whether the "enable reading list sync" panel was already shown to this user
DID_SHOW_ENABLE_SYNC_PANEL = 'did_show_enable_sync_panel'


class MemoryPreferences(Preferences):
    """Non-persistent preferences, used when the credential store has no flags."""
    
    def __init__(self):
        self._flags: Dict[str, bool] = {}
    
    def get_flag(self, name: str, default: bool = False) -> bool:
        return self._flags.get(name, default)
    
    def set_flag(self, name: str, value: bool) -> None:
        self._flags[name] = bool(value)
