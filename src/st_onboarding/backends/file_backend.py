import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from .base import StorageBackend
from ..errors import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileBackend(StorageBackend):
    """Local durable storage: one JSON file per key inside *directory*.

    Writes go to a temporary file in the same directory which then replaces the
    target, so a crash mid-write never leaves a truncated snapshot behind.
    """

    def __init__(self, directory: Union[str, Path] = ".st_onboarding", suffix: str = ".json") -> None:
        self.directory = Path(directory)
        self.suffix = suffix

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_CHARS.sub('_', key)}{self.suffix}"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)

        try:
            return path.read_text(encoding="utf-8")

        except FileNotFoundError:
            return None

        except OSError as exc:
            raise StorageError("read", key, exc) from exc

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)

            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=self.suffix)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp_name, path)

            except BaseException:
                # Leave no temp files behind when the write fails
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
                raise

        except OSError as exc:
            raise StorageError("write", key, exc) from exc

        logger.debug(f"Wrote {len(value)} chars to {path}")

    def delete(self, key: str) -> None:
        path = self.path_for(key)

        try:
            path.unlink()

        except FileNotFoundError:
            pass

        except OSError as exc:
            raise StorageError("delete", key, exc) from exc
