"""
Stanza channel contract — the streaming connection under a CCS session.

Implementations own the TLS socket, SASL login, keep-alive and
reconnection. The session only connects, logs in, sends stanzas and
registers callbacks.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from gcm_ccs.models.stanza import Stanza

StanzaPredicate = Callable[[Stanza], bool]
StanzaListener = Callable[[Stanza], Awaitable[None]]
StanzaInterceptor = Callable[[Stanza], None]


class ConnectionListener:
    """Connection lifecycle callbacks. All methods are no-ops by default."""

    def on_connected(self) -> None:
        pass

    def on_authenticated(self, resumed: bool = False) -> None:
        pass

    def on_reconnecting(self, delay_seconds: int) -> None:
        pass

    def on_reconnected(self) -> None:
        pass

    def on_reconnect_failed(self, error: Exception) -> None:
        pass

    def on_closed(self) -> None:
        pass

    def on_closed_with_error(self, error: Exception) -> None:
        pass


class StanzaChannel(ABC):
    """Bidirectional stanza stream.

    ``send_stanza`` raises :class:`~gcm_ccs.errors.NotConnectedError` when
    there is no live connection and ``login`` raises
    :class:`~gcm_ccs.errors.AuthenticationError` on rejected credentials.
    ``connect`` may raise :class:`~gcm_ccs.errors.TransportError`,
    ``OSError`` or ``asyncio.TimeoutError``.

    Listeners may be invoked concurrently for distinct stanzas.
    """

    @property
    @abstractmethod
    def connected(self) -> bool: ...

    @abstractmethod
    async def connect(self) -> None: ...

    @abstractmethod
    async def login(self, identity: str, secret: str) -> None: ...

    @abstractmethod
    async def send_stanza(self, stanza: Stanza) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    def add_connection_listener(self, listener: ConnectionListener) -> None: ...

    @abstractmethod
    def add_stanza_listener(self, listener: StanzaListener, stanza_filter: StanzaPredicate) -> None:
        """Register an inbound listener for stanzas accepted by ``stanza_filter``."""

    @abstractmethod
    def add_interceptor(self, interceptor: StanzaInterceptor, stanza_filter: StanzaPredicate) -> None:
        """Register a callback run on outgoing stanzas accepted by ``stanza_filter``."""
