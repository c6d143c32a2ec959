import logging
from functools import partial
from typing import Any, Callable, Optional, Union

from .base import BoundKey, StorageBackend

logger = logging.getLogger(__name__)


class RedisBackend(StorageBackend):
    """Redis-backed snapshot storage.

    Holds the connection configuration and the ``redis.StrictRedis`` client.
    Parameters match ``redis.StrictRedis`` plus a few extras:

    *default_ttl*: seconds before a snapshot expires.  ``None`` means no
    expiry.

    *key_prefix*: namespaces every Redis key as
    ``<prefix>:<session_id>:<key>``.

    *session_id*: controls how the current user is identified.

    * ``None`` (default): uses the Streamlit session ID (ephemeral;
      each browser tab gets its own ID), or ``"default"`` outside Streamlit.
    * ``str``: a fixed identity string, e.g. ``"juan"``.
    * ``Callable[[], str]``: called on every access so you can
      resolve the identity lazily, e.g.
      ``lambda: st.session_state.get("user_email", "anonymous")``.

    *client*: an already-built client exposing ``get``/``set``/``setex``/
    ``delete``; when given, no connection is opened.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
        default_ttl: Optional[int] = None,
        key_prefix: str = "st_onboarding",
        ssl: bool = False,
        socket_timeout: Optional[float] = None,
        session_id: Optional[Union[str, Callable[[], str]]] = None,
        client: Any = None,
        **kwargs: Any,
    ) -> None:

        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self.default_ttl = default_ttl
        self.key_prefix = key_prefix
        self.ssl = ssl
        self.socket_timeout = socket_timeout
        self.extra_kwargs = kwargs
        self._session_id_resolver = session_id

        self._client = client if client is not None else self._connect()

        logger.debug(f"Redis configured – {host}:{port} db={db}")

    # -- connection ----------------------------------------------------------

    def _connect(self):
        try:
            import redis as _redis

        except ImportError as exc:
            raise ImportError(
                "The 'redis' package is required for Redis snapshot storage.\n"
                "Install it with:  pip install st-onboarding[redis]"
            ) from exc

        return _redis.StrictRedis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            ssl=self.ssl,
            socket_timeout=self.socket_timeout,
            decode_responses=True,
            **self.extra_kwargs,
        )

    # -- key -----------------------------------------------------------------

    def _key(self, key: str, session_id: Optional[str] = None) -> str:
        return f"{self.key_prefix}:{session_id or self._session_id()}:{key}"

    # -- CRUD ----------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        return self._client.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self._write(self._key(key), value)

    def delete(self, key: str) -> None:
        self._client.delete(self._key(key))

    def bind(self, key: str) -> BoundKey:
        """Resolve the session identity now, so the returned operations can run off the script thread."""

        full_key = self._key(key)
        return BoundKey(
            set=partial(self._write, full_key),
            delete=partial(self._client.delete, full_key),
        )

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())

        except Exception as exc:
            logger.debug(f"Redis ping failed: {exc}")
            return False

    # -- internals -----------------------------------------------------------

    def _write(self, full_key: str, value: str) -> None:
        if self.default_ttl:
            self._client.setex(full_key, self.default_ttl, value)

        else:
            self._client.set(full_key, value)

    def _session_id(self) -> str:
        """Resolve the current session identity.

        Priority: explicit *session_id* passed to the constructor
        (string or callable) → Streamlit's runtime session ID → ``"default"``.
        """
        resolver = self._session_id_resolver

        if isinstance(resolver, str):
            return resolver

        if callable(resolver):
            return resolver()

        # Fallback: Streamlit runtime session ID
        try:

            from streamlit.runtime.scriptrunner import get_script_run_ctx
            ctx = get_script_run_ctx()

            if ctx is not None:
                return ctx.session_id

        except Exception as exc:
            logger.debug(f"Streamlit session id unavailable: {exc}")

        return "default"
