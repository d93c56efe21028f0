"""
CCS JSON message models — downstream envelope and the inbound variants.

Inbound messages form a closed set discriminated by ``message_type``:
absent for upstream data messages, ``ack``/``nack`` for delivery receipts
and ``control`` for connection control. Anything else is kept as
:class:`UnknownMessage`.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Longest time_to_live CCS accepts, in seconds (4 weeks).
MAX_TIME_TO_LIVE = 2_419_200


class MessageType:
    ACK = "ack"
    NACK = "nack"
    CONTROL = "control"


class ControlType:
    CONNECTION_DRAINING = "CONNECTION_DRAINING"


class DownstreamMessage(BaseModel):
    """Server-to-device message. Field names match the wire names."""

    to: Optional[str] = None
    message_id: Optional[str] = None
    data: dict[str, str] = Field(default_factory=dict)
    collapse_key: Optional[str] = None
    time_to_live: Optional[int] = Field(default=None, ge=0, le=MAX_TIME_TO_LIVE)
    delay_while_idle: Optional[bool] = None


class _Inbound(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # The decoded JSON object as received.
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)


class UpstreamMessage(_Inbound):
    """Device-to-server data message; carries no message_type."""

    message_type: Literal[None] = None
    from_: Optional[str] = Field(default=None, alias="from")
    category: Optional[str] = None
    message_id: Optional[str] = None
    data: Optional[dict[str, Any]] = None


class AckMessage(_Inbound):
    message_type: Literal["ack"] = MessageType.ACK
    from_: Optional[str] = Field(default=None, alias="from")
    message_id: Optional[str] = None


class NackMessage(_Inbound):
    message_type: Literal["nack"] = MessageType.NACK
    from_: Optional[str] = Field(default=None, alias="from")
    message_id: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None


class ControlMessage(_Inbound):
    message_type: Literal["control"] = MessageType.CONTROL
    control_type: Optional[str] = None


class UnknownMessage(_Inbound):
    message_type: str


InboundMessage = Union[UpstreamMessage, AckMessage, NackMessage, ControlMessage, UnknownMessage]
