import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# IngestResult.status values
APPLIED = "applied"
REJECTED = "rejected"
STALE = "stale"
FAILED = "failed"


@dataclass
class IngestResult:
    """Outcome of one ingestion call."""

    status: str
    data_url: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def applied(self) -> bool:
        return self.status == APPLIED


def media_type_of(upload: Any) -> str:
    """Declared media type of a file-like object ("" if it declares none).

    Streamlit's ``UploadedFile`` exposes ``type``; web framework uploads tend to
    use ``content_type`` or ``mimetype``.
    """

    for attr in ("type", "content_type", "mimetype"):
        value = getattr(upload, attr, None)
        if isinstance(value, str) and value:
            return value

    return ""


def is_image(upload: Any) -> bool:
    return media_type_of(upload).lower().startswith("image/")


def to_data_url(payload: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(payload).decode('ascii')}"


def read_bytes(upload: Any) -> bytes:
    if hasattr(upload, "getvalue"):
        return upload.getvalue()

    if hasattr(upload, "seek"):
        upload.seek(0)

    return upload.read()


class ImageIngestor:
    """Turns a selected or dropped image into a self-contained data URL.

    File picker selections and drag-and-drop payloads use the same entry point,
    :meth:`ingest`. Files whose media type is not ``image/*`` are discarded
    without touching the form.

    Each call takes a sequence number. When several reads overlap, only the most
    recently started call applies its result; earlier ones finish as ``"stale"``.
    """

    def __init__(self) -> None:
        self._seq = 0

    def cancel(self) -> None:
        """Make every read still in flight finish as stale."""

        self._seq += 1

    async def ingest(self, upload: Any, apply: Callable[[str], None]) -> IngestResult:
        """
        Read *upload* off the interaction thread and hand its data URL to *apply*.

        :param upload: File-like object with a media type and its bytes.
        :param apply: Called with the data URL once decoding finished, if this
                      call is still the most recent one.
        """

        if upload is None:
            return IngestResult(REJECTED)

        media_type = media_type_of(upload)
        if not is_image(upload):
            logger.debug(f"Ignoring non-image upload ({media_type or 'no media type'})")
            return IngestResult(REJECTED)

        self._seq += 1
        seq = self._seq

        try:
            payload = await asyncio.to_thread(read_bytes, upload)

        except Exception as exc:
            logger.warning(f"Reading image upload failed: {exc}")
            return IngestResult(FAILED, error=exc)

        data_url = to_data_url(payload, media_type)

        if seq != self._seq:
            logger.debug(f"Dropping image read #{seq}, superseded by #{self._seq}")
            return IngestResult(STALE, data_url=data_url)

        apply(data_url)
        return IngestResult(APPLIED, data_url=data_url)
