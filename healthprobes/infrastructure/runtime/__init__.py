"""Runtime metric sources: process memory and thread pools."""
from .process_memory import ProcessMemorySource
from .thread_pools import ManagedThreadPool, RuntimeThreadPools, RuntimeThreadPoolSource, runtime_thread_pools

__all__ = [
    'ProcessMemorySource',
    'ManagedThreadPool',
    'RuntimeThreadPools',
    'RuntimeThreadPoolSource',
    'runtime_thread_pools',
]
