"""In-memory stanza channel for offline testing."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from gcm_ccs.config import ConnectionConfig
from gcm_ccs.errors import AuthenticationError, NotConnectedError
from gcm_ccs.models.stanza import Message, Stanza
from gcm_ccs.transport.base import (
    ConnectionListener,
    StanzaChannel,
    StanzaInterceptor,
    StanzaListener,
    StanzaPredicate,
)

LOGGER = logging.getLogger(__name__)


class LoopbackChannel(StanzaChannel):
    """Records outgoing stanzas and lets the caller inject inbound ones.

    ``connect_error`` is raised from :meth:`connect` when set, and
    ``credentials`` (identity, secret) restricts which login succeeds.
    """

    def __init__(
        self,
        config: Optional[ConnectionConfig] = None,
        *,
        connect_error: Optional[BaseException] = None,
        credentials: Optional[tuple[str, str]] = None,
    ) -> None:
        self.config = config
        self.identity: Optional[str] = None
        self.sent: list[Stanza] = []
        self._connect_error = connect_error
        self._credentials = credentials
        self._connected = False
        self._connection_listeners: list[ConnectionListener] = []
        self._listeners: list[tuple[StanzaListener, StanzaPredicate]] = []
        self._interceptors: list[tuple[StanzaInterceptor, StanzaPredicate]] = []

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def sent_json(self) -> list[str]:
        """JSON payloads of the message stanzas sent so far."""
        return [s.json for s in self.sent if isinstance(s, Message) and s.json is not None]

    async def connect(self) -> None:
        LOGGER.debug("Loopback connect()")
        if self._connect_error is not None:
            raise self._connect_error
        self._connected = True
        for listener in list(self._connection_listeners):
            listener.on_connected()

    async def login(self, identity: str, secret: str) -> None:
        if not self._connected:
            raise NotConnectedError()
        if self._credentials is not None and (identity, secret) != self._credentials:
            raise AuthenticationError(f"Authentication failed for {identity}")
        self.identity = identity
        for listener in list(self._connection_listeners):
            listener.on_authenticated(False)

    async def send_stanza(self, stanza: Stanza) -> None:
        if not self._connected:
            raise NotConnectedError()
        for interceptor, accept in list(self._interceptors):
            if accept(stanza):
                interceptor(stanza)
        self.sent.append(stanza)

    async def deliver(self, stanza: Stanza) -> int:
        """Feed an inbound stanza to every listener whose filter accepts it.

        Returns how many listeners ran.
        """
        targets = [listener for listener, accept in list(self._listeners) if accept(stanza)]
        await asyncio.gather(*(listener(stanza) for listener in targets))
        return len(targets)

    async def close(self) -> None:
        LOGGER.debug("Loopback close()")
        if not self._connected:
            return
        self._connected = False
        for listener in list(self._connection_listeners):
            listener.on_closed()

    def drop(self, error: Exception) -> None:
        """Simulate the server closing the stream with an error."""
        self._connected = False
        for listener in list(self._connection_listeners):
            listener.on_closed_with_error(error)

    def reconnect(self, delay_seconds: int = 0) -> None:
        for listener in list(self._connection_listeners):
            listener.on_reconnecting(delay_seconds)
        self._connected = True
        for listener in list(self._connection_listeners):
            listener.on_reconnected()

    def fail_reconnect(self, error: Exception) -> None:
        for listener in list(self._connection_listeners):
            listener.on_reconnect_failed(error)

    def add_connection_listener(self, listener: ConnectionListener) -> None:
        self._connection_listeners.append(listener)

    def add_stanza_listener(self, listener: StanzaListener, stanza_filter: StanzaPredicate) -> None:
        self._listeners.append((listener, stanza_filter))

    def add_interceptor(self, interceptor: StanzaInterceptor, stanza_filter: StanzaPredicate) -> None:
        self._interceptors.append((interceptor, stanza_filter))
