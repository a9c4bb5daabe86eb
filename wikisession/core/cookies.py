"""
Cookie storage backed by an aiohttp cookie jar.

The same jar is handed to the API client, so cookies set by the login
endpoint land here and can be reconciled or wiped by the coordinator.
"""
from http.cookies import Morsel
from pathlib import Path
from typing import List, Optional, Union

import aiohttp
from aiohttp.abc import AbstractCookieJar
from yarl import URL

from .protocols import CookieStore
from .logging import get_logger

logger = get_logger('wikisession.cookies')


class AiohttpCookieStore(CookieStore):
    """
    Cookie store over ``aiohttp.CookieJar``.
    
    The jar is created lazily because aiohttp binds it to the running
    event loop.
    """
    
    # Attributes copied from the template cookie when recreating a cookie
    TEMPLATE_ATTRIBUTES = ('expires', 'max-age', 'domain', 'path', 'secure', 'httponly', 'samesite')
    
    def __init__(self, jar: Optional[AbstractCookieJar] = None):
        self._jar = jar
    
    @property
    def jar(self) -> AbstractCookieJar:
        if self._jar is None:
            self._jar = aiohttp.CookieJar()
        return self._jar
    
    def names(self) -> List[str]:
        """Names of all stored cookies."""
        return [morsel.key for morsel in self.jar]
    
    def get(self, name: str) -> Optional[Morsel]:
        """First stored cookie with the given name."""
        for morsel in self.jar:
            if morsel.key == name:
                return morsel
        return None
    
    def delete_all(self) -> None:
        count = len(self.jar)
        self.jar.clear()
        logger.debug(f"Deleted {count} cookie(s)")
    
    def recreate(self, name: str, template_name: str) -> bool:
        """
        Re-issue cookie ``name`` with its own value and the template's
        expiry, domain, path and flags.
        
        Args:
            name: Cookie to recreate (e.g. 'enwikiSession')
            template_name: Longer-lived cookie to copy attributes from
                (e.g. 'enwikiUserID')
            
        Returns:
            True if the cookie was recreated, False if either was missing
        """
        source = self.get(name)
        template = self.get(template_name)
        if source is None or template is None:
            logger.debug(f"Skipping cookie {name}: source or template {template_name} missing")
            return False
        
        cookie: Morsel = Morsel()
        cookie.set(name, source.value, source.coded_value)
        for attribute in self.TEMPLATE_ATTRIBUTES:
            value = template.get(attribute)
            if value:
                cookie[attribute] = value
        
        domain = (template['domain'] or source['domain']).lstrip('.')
        
        self.jar.clear(lambda morsel: morsel is source)
        self.jar.update_cookies({name: cookie}, URL(f"https://{domain}/"))
        logger.debug(f"Recreated cookie {name} using {template_name} as template")
        return True
    
    def save(self, path: Union[str, Path]) -> None:
        """Persist cookies to a file."""
        self.jar.save(Path(path))
    
    def load(self, path: Union[str, Path]) -> bool:
        """
        Load cookies from a file.
        
        Returns:
            False if the file does not exist
        """
        path = Path(path)
        if not path.exists():
            return False
        self.jar.load(path)
        return True
    
    def __len__(self) -> int:
        return len(self.jar)
