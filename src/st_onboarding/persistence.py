import logging
import queue
import threading
from functools import partial
from typing import Callable, Optional, Tuple, Type

from .backends.base import StorageBackend
from .core.snapshot import Snapshot
from .core.state import FormState
from .form import OnboardingForm
from .errors import InvalidSnapshotError
from .utils.converters import deserialize_state, serialize_state

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Best-effort persistence of form snapshots under one fixed key.

    Nothing here ever raises into the interactive flow: read, write and delete
    failures are logged and treated as "no prior state".

    Writes are fire-and-forget. With *async_writes* each :meth:`save` queues the
    serialized payload for a single daemon writer thread, so the caller never
    waits on storage I/O. Every save takes a sequence number and the writer skips
    a payload once a newer save (or :meth:`clear`) was issued, so an older
    snapshot never overwrites a newer one. Deletes go through the same queue and
    therefore land after any write issued before them.

    *form_cls* describes the canonical shape that loaded snapshots are merged
    over, and supplies the storage key unless *key* is given.
    """

    def __init__(
        self,
        backend: StorageBackend,
        form_cls: Optional[Type[FormState]] = None,
        key: Optional[str] = None,
        async_writes: bool = True,
    ) -> None:
        self.backend = backend
        self.form_cls = form_cls or OnboardingForm
        self.key = key or self.form_cls.config()["storage_key"]
        self.async_writes = async_writes

        self._lock = threading.Lock()
        self._seq = 0
        self._queue: "queue.Queue[Tuple[Callable[[], None], threading.Event]]" = queue.Queue()
        self._writer: Optional[threading.Thread] = None
        self._last_done: Optional[threading.Event] = None

    # -- public API ----------------------------------------------------------

    def save(self, snapshot: Snapshot) -> None:
        """Persist *snapshot* without blocking the caller on the write."""

        try:
            payload = serialize_state(snapshot.to_dict())

            # Bound on the caller's thread: the key can depend on the current session
            bound = self.backend.bind(self.key)

        except Exception as exc:
            logger.warning(f"Snapshot save failed [{self.key}]: {exc}")
            return

        with self._lock:
            self._seq += 1
            seq = self._seq

        if not self.async_writes:
            self._save_worker(seq, bound.set, payload)
            return

        self._submit(partial(self._save_worker, seq, bound.set, payload))

    def load(self) -> Optional[Snapshot]:
        """The stored snapshot merged over the defaults, or ``None`` if there is none usable."""

        try:
            raw = self.backend.get(self.key)

        except Exception as exc:
            logger.warning(f"Snapshot load failed [{self.key}]: {exc}")
            return None

        if raw is None:
            return None

        try:
            snapshot = Snapshot.from_dict(
                deserialize_state(raw),
                defaults=self.form_cls.defaults(),
                field_names=self.form_cls.field_names(),
                max_step=self.form_cls.steps,
            )

        except InvalidSnapshotError as exc:
            logger.warning(f"Discarding stored snapshot [{self.key}]: {exc}")
            return None

        logger.debug(f"Loaded snapshot [{self.key}] at step {snapshot.step}")
        return snapshot

    def clear(self) -> None:
        """Delete the stored snapshot and drop any write still pending."""

        # Pending writes see a newer sequence number and skip themselves
        with self._lock:
            self._seq += 1

        try:
            bound = self.backend.bind(self.key)

        except Exception as exc:
            logger.warning(f"Snapshot delete failed [{self.key}]: {exc}")
            return

        if not self.async_writes:
            self._delete_worker(bound.delete)
            return

        self._submit(partial(self._delete_worker, bound.delete))

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every queued write and delete has finished."""

        done = self._last_done
        if done is not None:
            done.wait(timeout)

    # -- internals -----------------------------------------------------------

    def _submit(self, task: Callable[[], None]) -> None:
        done = threading.Event()

        with self._lock:
            if self._writer is None or not self._writer.is_alive():
                self._writer = threading.Thread(target=self._drain, name="st_onboarding-writer", daemon=True)
                self._writer.start()

            self._last_done = done
            self._queue.put((task, done))

    def _drain(self) -> None:
        while True:
            task, done = self._queue.get()
            try:
                task()
            finally:
                done.set()

    def _save_worker(self, seq: int, write: Callable[[str], None], payload: str) -> None:
        with self._lock:
            superseded = seq != self._seq

        if superseded:
            logger.debug(f"Skipping superseded snapshot write #{seq} [{self.key}]")
            return

        try:
            write(payload)

        except Exception as exc:
            logger.warning(f"Snapshot save failed [{self.key}]: {exc}")

    def _delete_worker(self, delete: Callable[[], None]) -> None:
        try:
            delete()

        except Exception as exc:
            logger.warning(f"Snapshot delete failed [{self.key}]: {exc}")
