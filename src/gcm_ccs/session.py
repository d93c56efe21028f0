"""
CCS session manager.

Owns the stanza channel for one session, wires the stanza filter, message
router and drain controller to it, and exposes the gated and ungated send
paths.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, Optional

from gcm_ccs.codec import MessageCodec
from gcm_ccs.config import ConnectionConfig
from gcm_ccs.drain import DrainController
from gcm_ccs.errors import ConnectError, DecodeError, NotConnectedError, SendFailed, TransportError
from gcm_ccs.models.messages import DownstreamMessage
from gcm_ccs.models.stanza import Message, Stanza
from gcm_ccs.router import MessageHandlers, MessageRouter
from gcm_ccs.stanza_filter import StanzaFilter
from gcm_ccs.transport.base import ConnectionListener, StanzaChannel

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[ConnectionConfig], StanzaChannel]


def default_message_id() -> str:
    """Random message id. Good enough to correlate logs, not guaranteed unique."""
    return f"m-{uuid.uuid4()}"


class SessionManager(ConnectionListener):
    """One CCS session over a stanza channel.

    The lifecycle callbacks only log; subclass to extend them.
    """

    def __init__(
        self,
        channel_factory: ChannelFactory,
        project_id: str,
        config: Optional[ConnectionConfig] = None,
        handlers: Optional[MessageHandlers] = None,
        codec: Optional[MessageCodec] = None,
        id_factory: Callable[[], str] = default_message_id,
    ):
        self._channel_factory = channel_factory
        self._config = config or ConnectionConfig()
        self._codec = codec or MessageCodec()
        self._id_factory = id_factory
        self._drain = DrainController()
        self._filter = StanzaFilter(project_id)
        self._router = MessageRouter(self, handlers=handlers, codec=self._codec)
        self._channel: Optional[StanzaChannel] = None

    @property
    def channel(self) -> Optional[StanzaChannel]:
        return self._channel

    @property
    def connected(self) -> bool:
        return self._channel is not None and self._channel.connected

    @property
    def drain(self) -> DrainController:
        return self._drain

    @property
    def draining(self) -> bool:
        return self._drain.is_draining()

    @property
    def stanza_filter(self) -> StanzaFilter:
        return self._filter

    @property
    def router(self) -> MessageRouter:
        return self._router

    async def connect(self, sender_id: str, api_key: str) -> None:
        """Open the channel and log in as ``<sender_id>@<domain>``."""
        channel = self._channel_factory(self._config)
        self._channel = channel
        channel.add_connection_listener(self)

        logger.info("Connecting to %s:%s...", self._config.host, self._config.port)
        try:
            await channel.connect()
            channel.add_stanza_listener(self._on_stanza, self._filter)
            channel.add_interceptor(self._on_outgoing, self._filter)
            await channel.login(self._config.identity(sender_id), api_key)
        except (TransportError, OSError, asyncio.TimeoutError) as e:
            await self._discard_channel(channel)
            raise ConnectError(f"Failed to connect to CCS: {e}") from e

    async def _discard_channel(self, channel: StanzaChannel) -> None:
        self._channel = None
        try:
            await channel.close()
        except (TransportError, OSError) as e:
            logger.debug("Ignoring error while closing failed channel: %s", e)

    async def close(self) -> None:
        if self._channel is not None:
            await self._channel.close()

    def next_message_id(self) -> str:
        return self._id_factory()

    async def send_downstream(self, envelope: DownstreamMessage) -> bool:
        """Send a new downstream message unless the connection is draining.

        Returns False without touching the channel while draining. Raises
        EncodeError for an incomplete envelope and SendFailed when the
        channel is not connected.
        """
        if self._drain.is_draining():
            logger.info("Dropping downstream message since the connection is draining")
            return False
        await self._send(self._codec.encode_downstream(envelope))
        return True

    async def send_raw(self, text: str) -> None:
        """Send an already encoded payload, ignoring the drain state."""
        await self._send(text)

    async def _send(self, text: str) -> None:
        if self._channel is None:
            raise SendFailed("Session was never connected")
        try:
            await self._channel.send_stanza(Message(json=text))
        except NotConnectedError as e:
            raise SendFailed(str(e)) from e

    async def _on_stanza(self, stanza: Stanza) -> None:
        logger.debug("Received: %s", stanza.to_xml())
        text = getattr(stanza, "json", None)
        if text is None:
            logger.debug("Ignoring stanza without a CCS payload")
            return
        try:
            await self._router.process(text)
        except DecodeError:
            logger.exception("Error parsing JSON %s", text)
        except Exception:
            logger.exception("Failed to process stanza")

    def _on_outgoing(self, stanza: Stanza) -> None:
        logger.debug("Sent: %s", stanza.to_xml())

    # Connection lifecycle

    def on_connected(self) -> None:
        logger.info("Connected")

    def on_authenticated(self, resumed: bool = False) -> None:
        logger.info("Authenticated (resumed=%s)", resumed)

    def on_reconnecting(self, delay_seconds: int) -> None:
        logger.info("Reconnecting in %d secs", delay_seconds)

    def on_reconnected(self) -> None:
        logger.info("Reconnected")

    def on_reconnect_failed(self, error: Exception) -> None:
        logger.info("Reconnection failed: %s", error)

    def on_closed(self) -> None:
        logger.info("Connection closed")

    def on_closed_with_error(self, error: Exception) -> None:
        logger.error("Connection closed on error: %s", error)
