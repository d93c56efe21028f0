"""
CCS JSON envelope construction and parsing.
"""

import json
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from gcm_ccs.errors import DecodeError, EncodeError
from gcm_ccs.models.messages import (
    AckMessage,
    ControlMessage,
    DownstreamMessage,
    InboundMessage,
    MessageType,
    NackMessage,
    UnknownMessage,
    UpstreamMessage,
)

_VARIANTS = {
    MessageType.ACK: AckMessage,
    MessageType.NACK: NackMessage,
    MessageType.CONTROL: ControlMessage,
}


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"))


class MessageCodec:
    """Encodes downstream envelopes and acks, decodes inbound payloads.

    ``dumps``/``loads`` are the generic JSON capability and can be swapped
    for another serializer with the same contract.
    """

    def __init__(
        self,
        dumps: Callable[[Any], str] = _dumps,
        loads: Callable[[str], Any] = json.loads,
    ):
        self._dumps = dumps
        self._loads = loads

    def encode_downstream(self, envelope: DownstreamMessage) -> str:
        if not envelope.to:
            raise EncodeError("Downstream message requires 'to'")
        if not envelope.message_id:
            raise EncodeError("Downstream message requires 'message_id'", details={"to": envelope.to})
        message: dict[str, Any] = {
            "to": envelope.to,
            "message_id": envelope.message_id,
            "data": dict(envelope.data),
        }
        if envelope.collapse_key is not None:
            message["collapse_key"] = envelope.collapse_key
        if envelope.time_to_live is not None:
            message["time_to_live"] = envelope.time_to_live
        if envelope.delay_while_idle:
            message["delay_while_idle"] = True
        return self._dumps(message)

    def encode_ack(self, to: Optional[str], message_id: Optional[str]) -> str:
        if not to or not message_id:
            raise EncodeError("Ack requires 'to' and 'message_id'", details={"to": to, "message_id": message_id})
        return self._dumps({"message_type": MessageType.ACK, "to": to, "message_id": message_id})

    def decode(self, text: str) -> dict[str, Any]:
        """Parse JSON text into a mapping. No schema validation happens here."""
        try:
            obj = self._loads(text)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Malformed JSON: {e}", payload=text) from e
        if not isinstance(obj, dict):
            raise DecodeError(f"Expected a JSON object, got {type(obj).__name__}", payload=text)
        return obj

    def parse_message(self, obj: Mapping[str, Any]) -> InboundMessage:
        return parse_message(obj)


def parse_message(obj: Mapping[str, Any]) -> InboundMessage:
    """Build the inbound variant for a decoded object.

    A missing expected field reads as ``None``. A field of an impossible
    type (``data`` that is not an object, say) raises :class:`DecodeError`.
    """
    message_type = obj.get("message_type")
    try:
        if message_type is None:
            message: InboundMessage = UpstreamMessage.model_validate(obj)
        else:
            kind = str(message_type)
            variant = _VARIANTS.get(kind)
            if variant is None:
                message = UnknownMessage.model_validate({**obj, "message_type": kind})
            else:
                message = variant.model_validate({**obj, "message_type": kind})
    except ValidationError as e:
        raise DecodeError(f"Invalid CCS message: {e}") from e
    message.raw = dict(obj)
    return message


_default_codec = MessageCodec()


def encode_downstream(envelope: DownstreamMessage) -> str:
    return _default_codec.encode_downstream(envelope)


def encode_ack(to: Optional[str], message_id: Optional[str]) -> str:
    return _default_codec.encode_ack(to, message_id)


def decode(text: str) -> dict[str, Any]:
    return _default_codec.decode(text)


def create_message(
    to: str,
    message_id: str,
    data: Optional[Mapping[str, str]] = None,
    collapse_key: Optional[str] = None,
    time_to_live: Optional[int] = None,
    delay_while_idle: bool = False,
) -> str:
    """Build and encode a downstream message in one call."""
    envelope = DownstreamMessage(
        to=to,
        message_id=message_id,
        data=dict(data or {}),
        collapse_key=collapse_key,
        time_to_live=time_to_live,
        delay_while_idle=delay_while_idle or None,
    )
    return encode_downstream(envelope)
