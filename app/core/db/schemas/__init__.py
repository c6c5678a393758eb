# Import models so Base metadata is aware of them
from .storage import StorageEntry  # noqa: F401
