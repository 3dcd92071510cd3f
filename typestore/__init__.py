from typestore.bounded import BoundedQueue
from typestore.config import Settings
from typestore.errors import Failure, FailureKind, ProbeError, Unimplemented
from typestore.keys import compose_key, listing_prefix
from typestore.stores import Store, implements
from typestore.stores.memory import InMemoryStore
from typestore.stores.remote import RemoteObjectStore

__all__ = [
    "BoundedQueue",
    "Failure",
    "FailureKind",
    "InMemoryStore",
    "ProbeError",
    "RemoteObjectStore",
    "Settings",
    "Store",
    "Unimplemented",
    "compose_key",
    "implements",
    "listing_prefix",
]
