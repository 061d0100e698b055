import time
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from app.logging.logger import Log


@dataclass(frozen=True)
class TempFileHandle:
    """A file written to disk so the transport can send it by path."""

    path: Path
    created_at: datetime


class TempArtifactManager:
    """Writes request-scoped temporary files and guarantees their deletion."""

    def __init__(self, work_dir: Path) -> None:
        self._work_dir = work_dir

    def unique_path(self, prefix: str, suffix: str) -> Path:
        """Timestamp-qualified name with a random suffix so concurrent requests never collide."""
        stamp = time.time_ns() // 1_000_000
        return self._work_dir / f"{prefix}_{stamp}_{uuid.uuid4().hex[:12]}{suffix}"

    @contextmanager
    def materialize(
        self,
        data: bytes,
        prefix: str,
        suffix: str,
    ) -> Generator[TempFileHandle, None, None]:
        """Write data to a fresh file and delete it on every exit path.

        Write failures propagate. Deletion failures are logged, never raised.
        """
        self._work_dir.mkdir(parents=True, exist_ok=True)
        handle = TempFileHandle(
            path=self.unique_path(prefix, suffix),
            created_at=datetime.now(timezone.utc),
        )
        try:
            handle.path.write_bytes(data)
            Log.debug(f"Materialized {len(data)} bytes at {handle.path}")
            yield handle
        finally:
            self.release(handle)

    def release(self, handle: TempFileHandle) -> None:
        try:
            handle.path.unlink(missing_ok=True)
        except OSError as exc:
            Log.error(f"Could not delete temporary file {handle.path}: {exc}")
