"""
API configuration module.

Provides configuration for the MediaWiki API client and for the
session workflows built on top of it.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import ssl


@dataclass
class ProxyConfig:
    """
    Proxy configuration.
    
    Supports HTTP and HTTPS proxies.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    
    def to_aiohttp_proxy(self) -> Optional[str]:
        """Convert to aiohttp proxy format."""
        if not self.url:
            return None
        
        if self.username and self.password:
            if '://' in self.url:
                protocol, rest = self.url.split('://', 1)
                return f"{protocol}://{self.username}:{self.password}@{rest}"
        
        return self.url


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.
    
    Allows customization of SSL behavior for security requirements.
    """
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True
    
    def create_ssl_context(self):
        """Create SSL context from configuration (False disables verification)."""
        if not self.verify:
            return False
        
        context = ssl.create_default_context()
        
        if self.ca_file:
            context.load_verify_locations(self.ca_file)
        
        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )
        
        context.check_hostname = self.check_hostname
        
        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.
    
    The first four values bound single HTTP requests; ``operation`` bounds
    a whole coordinator workflow (token fetch + login submit, for example).
    """
    total: float = 30.0
    connect: float = 10.0
    sock_read: float = 20.0
    sock_connect: float = 10.0
    operation: float = 60.0
    
    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class APIConfig:
    """
    Complete API configuration.
    
    The default login site is derived from ``language_code`` and
    ``project_domain``, e.g. ``https://en.wikipedia.org``.
    """
    # Site settings
    language_code: Optional[str] = 'en'
    project_domain: str = 'wikipedia.org'
    api_path: str = '/w/api.php'
    
    # User agent
    user_agent: str = 'wikisession/1.0.0'
    
    # Sub-configurations
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    
    # Additional headers
    extra_headers: Dict[str, str] = field(default_factory=dict)
    
    # Logging
    log_level: int = 20  # logging.INFO
    
    # Connection pool settings
    limit_per_host: int = 10
    limit: int = 100
    
    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()
    
    @classmethod
    def for_language(cls, language_code: str, **kwargs) -> 'APIConfig':
        """Create configuration for another language edition."""
        return cls(language_code=language_code, **kwargs)
    
    @property
    def default_site(self) -> Optional[str]:
        """Default login site URL, or None without a language."""
        if not self.language_code:
            return None
        return f"https://{self.language_code}.{self.project_domain}"
    
    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }
    
    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }
        
        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
