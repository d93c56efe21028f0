"""
Inbound message dispatch.

| message_type | handler          | reply                    |
|--------------|------------------|--------------------------|
| (absent)     | handle_upstream  | ack, always (ungated)    |
| ack          | handle_ack       | none                     |
| nack         | handle_nack      | none                     |
| control      | handle_control   | none                     |
| anything else| handle_unknown   | none                     |
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from gcm_ccs.codec import MessageCodec
from gcm_ccs.errors import EncodeError, SendFailed
from gcm_ccs.models.messages import (
    AckMessage,
    ControlMessage,
    ControlType,
    DownstreamMessage,
    InboundMessage,
    NackMessage,
    UnknownMessage,
    UpstreamMessage,
)

if TYPE_CHECKING:
    from gcm_ccs.session import SessionManager

logger = logging.getLogger(__name__)

ECHO_COLLAPSE_KEY = "echo:CollapseKey"


class MessageHandlers:
    """Per-kind handlers. Override any subset; the rest keep their defaults."""

    async def handle_upstream(self, message: UpstreamMessage, session: SessionManager) -> Optional[bool]:
        """Echo the payload back to the sending device.

        Returns the result of the gated send, or False when the connection
        dropped before the echo could go out.
        """
        payload = {str(k): str(v) for k, v in (message.data or {}).items()}
        payload["ECHO"] = f"Application: {message.category}"
        echo = DownstreamMessage(
            to=message.from_,
            message_id=session.next_message_id(),
            data=payload,
            collapse_key=ECHO_COLLAPSE_KEY,
        )
        try:
            return await session.send_downstream(echo)
        except SendFailed as e:
            logger.warning("Not connected anymore, echo message is not sent: %s", e)
            return False

    async def handle_ack(self, message: AckMessage, session: SessionManager) -> None:
        logger.info("Ack received from %s for message %s", message.from_, message.message_id)

    async def handle_nack(self, message: NackMessage, session: SessionManager) -> None:
        logger.info(
            "Nack received from %s for message %s: %s %s",
            message.from_, message.message_id, message.error, message.error_description or "",
        )

    async def handle_control(self, message: ControlMessage, session: SessionManager) -> None:
        logger.info("Control message: %s", message.raw)
        if message.control_type == ControlType.CONNECTION_DRAINING:
            if session.drain.begin_draining():
                logger.info("Connection is draining, downstream messages will be dropped")
        else:
            logger.info(
                "Unrecognized control type: %s. This could happen if new features are added to the CCS protocol.",
                message.control_type,
            )

    async def handle_unknown(self, message: UnknownMessage, session: SessionManager) -> None:
        logger.warning("Unrecognized message type (%s)", message.message_type)


class MessageRouter:
    def __init__(
        self,
        session: SessionManager,
        handlers: Optional[MessageHandlers] = None,
        codec: Optional[MessageCodec] = None,
    ):
        self._session = session
        self._handlers = handlers or MessageHandlers()
        self._codec = codec or MessageCodec()

    @property
    def handlers(self) -> MessageHandlers:
        return self._handlers

    async def process(self, text: str) -> InboundMessage:
        """Decode a raw CCS payload and route it. Raises DecodeError on bad input."""
        message = self._codec.parse_message(self._codec.decode(text))
        await self.route(message)
        return message

    async def route(self, message: InboundMessage) -> None:
        session = self._session
        if isinstance(message, UpstreamMessage):
            try:
                await self._handlers.handle_upstream(message, session)
            except Exception:
                logger.exception("Upstream handler failed for message %s from %s", message.message_id, message.from_)
            await self._send_ack(message)
        elif isinstance(message, AckMessage):
            await self._handlers.handle_ack(message, session)
        elif isinstance(message, NackMessage):
            await self._handlers.handle_nack(message, session)
        elif isinstance(message, ControlMessage):
            await self._handlers.handle_control(message, session)
        else:
            await self._handlers.handle_unknown(message, session)

    async def _send_ack(self, message: UpstreamMessage) -> None:
        try:
            ack = self._codec.encode_ack(message.from_, message.message_id)
        except EncodeError:
            logger.warning("Cannot ack upstream message without from/message_id: %s", message.raw)
            return
        # Acks bypass the drain gate.
        await self._session.send_raw(ack)
