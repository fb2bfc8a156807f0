"""Object storage boundary for document blobs."""

from respondo.boundary.storage.object_store import S3ObjectStore

__all__ = ["S3ObjectStore"]
