# Infrastructure Adapters Package
from .compression import GzipCompressor
from .json_store import JsonActivityRepository, JsonListRepository
from .memory_store import InMemoryActivityRepository, InMemoryListRepository

__all__ = [
    "GzipCompressor",
    "JsonActivityRepository",
    "JsonListRepository",
    "InMemoryActivityRepository",
    "InMemoryListRepository",
]
