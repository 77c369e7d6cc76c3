"""Content-addressable blob storage for raw source files.

The pipeline only needs `put(bytes) -> BlobRef` and `get(id) -> bytes`; how the
bytes are kept is up to the backend.
"""

import hashlib
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class BlobRef:
    """Handle to a stored blob."""
    id: str
    checksum: str
    size: int


class BlobStore(ABC):
    """Abstract blob store. Identical bytes map to the same blob id."""

    @abstractmethod
    def put(self, data: bytes) -> BlobRef:
        """Store bytes and return their reference."""
        ...

    @abstractmethod
    def get(self, blob_id: str) -> bytes:
        """Return stored bytes. Raises KeyError if absent."""
        ...

    @abstractmethod
    def exists(self, blob_id: str) -> bool:
        ...

    @staticmethod
    def digest(data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()


class InMemoryBlobStore(BlobStore):
    """Blob store backed by a dict."""

    def __init__(self):
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, data: bytes) -> BlobRef:
        digest = self.digest(data)
        with self._lock:
            self._blobs.setdefault(digest, bytes(data))
        return BlobRef(id=digest, checksum=digest, size=len(data))

    def get(self, blob_id: str) -> bytes:
        with self._lock:
            if blob_id not in self._blobs:
                raise KeyError(f"Blob not found: {blob_id}")
            return self._blobs[blob_id]

    def exists(self, blob_id: str) -> bool:
        with self._lock:
            return blob_id in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)


class FileBlobStore(BlobStore):
    """Blob store writing one file per blob, named by its SHA-256 digest.

    Files are sharded by the first two hex characters: root/ab/abcdef...
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, blob_id: str) -> Path:
        return self.root / blob_id[:2] / blob_id

    def put(self, data: bytes) -> BlobRef:
        digest = self.digest(data)
        path = self._path(digest)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".tmp")
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        return BlobRef(id=digest, checksum=digest, size=len(data))

    def get(self, blob_id: str) -> bytes:
        path = self._path(blob_id)
        if not path.exists():
            raise KeyError(f"Blob not found: {blob_id}")
        return path.read_bytes()

    def exists(self, blob_id: str) -> bool:
        return self._path(blob_id).exists()
