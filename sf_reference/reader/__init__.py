"""Read layer over generated reference data."""

from sf_reference.reader.cache import ReaderCache
from sf_reference.reader.reader import TieredReader
from sf_reference.reader.storage import HttpStorage, LocalStorage, StorageAdapter, StorageError

__all__ = ['ReaderCache', 'TieredReader', 'HttpStorage', 'LocalStorage', 'StorageAdapter', 'StorageError']
