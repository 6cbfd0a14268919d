"""
Address store implementations
"""
from .memory import MemoryAddressStore, create_memory_store

__all__ = [
    "MemoryAddressStore",
    "create_memory_store",
]
