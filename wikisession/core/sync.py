"""Reading-list sync switch."""
from .logging import get_logger

logger = get_logger('wikisession.sync')


class ReadingListSyncController:
    """
    Tracks whether reading-list sync is enabled. ``is_logged_in`` is kept
    current by the session coordinator; sync only runs while both are true.
    
    Disabling sync never deletes data unless asked to; the delete flags
    are recorded so a sync backend can act on them.
    """
    
    def __init__(self, enabled: bool = False):
        self.is_logged_in = False
        self._enabled = enabled
        self.pending_local_delete = False
        self.pending_remote_delete = False
    
    @property
    def is_sync_enabled(self) -> bool:
        return self._enabled
    
    @property
    def is_syncing(self) -> bool:
        return self._enabled and self.is_logged_in
    
    def set_sync_enabled(
        self,
        enabled: bool,
        delete_local: bool = False,
        delete_remote: bool = False
    ) -> None:
        """
        Turn sync on or off.
        
        Args:
            enabled: New sync state
            delete_local: Delete local reading lists
            delete_remote: Delete reading lists on the server
        """
        logger.info(
            f"Reading list sync {'enabled' if enabled else 'disabled'} "
            f"(delete_local={delete_local}, delete_remote={delete_remote})"
        )
        self._enabled = enabled
        self.pending_local_delete = delete_local
        self.pending_remote_delete = delete_remote
