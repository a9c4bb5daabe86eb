"""
SQLite credential storage implementation.

Provides persistent credential storage using a SQLite database, plus a
small ``flags`` table for one-time onboarding flags.
"""
import sqlite3
import threading
from pathlib import Path
from datetime import datetime
from typing import Optional, Union
from contextlib import contextmanager

from .protocols import CredentialStore
from .models import Credentials, PresentCredentials, credentials_from_fields


class SQLiteCredentialStore(CredentialStore):
    """
    SQLite-based credential storage.
    
    Stores credentials in a local SQLite database file. Thread-safe.
    
    Example:
        >>> store = SQLiteCredentialStore("reader")
        >>> # Creates reader.credentials file
        >>> store.save(PresentCredentials('Alice', 'secret', 'en.wikipedia.org'))
        >>> store.load().host
        'en.wikipedia.org'
    """
    
    EXTENSION = '.credentials'
    SCHEMA_VERSION = 1
    
    def __init__(
        self,
        store_name: Union[str, Path],
        base_path: Optional[Path] = None
    ):
        """
        Initialize SQLite credential storage.
        
        Args:
            store_name: Store name (without extension) or full path
            base_path: Optional base directory for store files
        """
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        
        if isinstance(store_name, Path) or store_name.endswith(self.EXTENSION):
            self._path = Path(store_name)
        elif base_path:
            self._path = base_path / f"{store_name}{self.EXTENSION}"
        else:
            self._path = Path(f"{store_name}{self.EXTENSION}")
        
        self._path.parent.mkdir(parents=True, exist_ok=True)
        
        self._init_db()
    
    @property
    def path(self) -> Path:
        """Get store file path."""
        return self._path
    
    @contextmanager
    def _get_connection(self):
        """Get thread-safe database connection."""
        with self._lock:
            if self._conn is None:
                self._conn = sqlite3.connect(
                    str(self._path),
                    check_same_thread=False
                )
                self._conn.row_factory = sqlite3.Row
            yield self._conn
    
    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS version (
                    version INTEGER PRIMARY KEY
                )
            ''')
            
            # Single row; username/password are NULL after logout
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS credentials (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    username TEXT,
                    password TEXT,
                    host TEXT,
                    updated_at TEXT NOT NULL
                )
            ''')
            
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS flags (
                    name TEXT PRIMARY KEY,
                    value INTEGER NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')
            
            cursor.execute('SELECT version FROM version LIMIT 1')
            row = cursor.fetchone()
            if row is None:
                cursor.execute(
                    'INSERT INTO version (version) VALUES (?)',
                    (self.SCHEMA_VERSION,)
                )
            
            conn.commit()
    
    def load(self) -> Credentials:
        """
        Load credentials from database.
        
        Returns:
            PresentCredentials if a full pair is saved, AbsentCredentials otherwise
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('SELECT username, password, host FROM credentials WHERE id = 1')
            row = cursor.fetchone()
            if row is None:
                return credentials_from_fields(None, None)
            return credentials_from_fields(row['username'], row['password'], row['host'])
    
    def save(self, credentials: PresentCredentials) -> None:
        """
        Save credentials to database. Committed before returning.
        
        Args:
            credentials: Credentials to save
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                INSERT OR REPLACE INTO credentials (id, username, password, host, updated_at)
                VALUES (1, ?, ?, ?, ?)
            ''', (
                credentials.username,
                credentials.password,
                credentials.host,
                datetime.now().isoformat(),
            ))
            conn.commit()
    
    def clear(self) -> None:
        """Forget username and password, keep the host."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                UPDATE credentials
                SET username = NULL, password = NULL, updated_at = ?
                WHERE id = 1
            ''', (datetime.now().isoformat(),))
            conn.commit()
    
    def exists(self) -> bool:
        """
        Check if a username/password pair is saved.
        
        Returns:
            True if credentials are present
        """
        return self.load().is_present
    
    def get_flag(self, name: str, default: bool = False) -> bool:
        """
        Get a boolean flag.
        
        Args:
            name: Flag name
            default: Value when the flag was never set
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('SELECT value FROM flags WHERE name = ?', (name,))
            row = cursor.fetchone()
            if row is None:
                return default
            return bool(row['value'])
    
    def set_flag(self, name: str, value: bool) -> None:
        """
        Set a boolean flag.
        
        Args:
            name: Flag name
            value: Flag value
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                INSERT OR REPLACE INTO flags (name, value, updated_at)
                VALUES (?, ?, ?)
            ''', (name, int(bool(value)), datetime.now().isoformat()))
            conn.commit()
    
    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
    
    def delete_file(self) -> None:
        """Delete the store file completely."""
        self.close()
        if self._path.exists():
            self._path.unlink()
    
    def __enter__(self) -> 'SQLiteCredentialStore':
        """Context manager entry."""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
