"""
Credential storage module.

Saved credentials are a tagged value (present pair or absent) kept in a
pluggable store: SQLite on disk, or memory for tests.
"""
from .models import (
    Credentials,
    PresentCredentials,
    AbsentCredentials,
    credentials_from_fields,
    credentials_to_dict,
    credentials_from_dict,
    credentials_to_json,
    credentials_from_json,
)
from .protocols import CredentialStore
from .memory_store import MemoryCredentialStore
from .sqlite_store import SQLiteCredentialStore

__all__ = [
    'Credentials',
    'PresentCredentials',
    'AbsentCredentials',
    'credentials_from_fields',
    'credentials_to_dict',
    'credentials_from_dict',
    'credentials_to_json',
    'credentials_from_json',
    'CredentialStore',
    'MemoryCredentialStore',
    'SQLiteCredentialStore',
]
