"""
gcm-ccs — protocol session handler for the GCM Cloud Connection Server.

Stanza filtering, message dispatch, connection draining and the CCS JSON
envelope over an abstract stanza channel.
"""

from gcm_ccs.codec import MessageCodec, create_message, decode, encode_ack, encode_downstream, parse_message
from gcm_ccs.config import CcsSettings, ConnectionConfig, load_settings, save_settings
from gcm_ccs.drain import DrainController
from gcm_ccs.errors import (
    AuthenticationError,
    CcsError,
    ConnectError,
    DecodeError,
    EncodeError,
    NotConnectedError,
    SendFailed,
    TransportError,
)
from gcm_ccs.models.messages import (
    AckMessage,
    ControlMessage,
    ControlType,
    DownstreamMessage,
    InboundMessage,
    MessageType,
    NackMessage,
    UnknownMessage,
    UpstreamMessage,
)
from gcm_ccs.models.stanza import Message, Stanza
from gcm_ccs.router import MessageHandlers, MessageRouter
from gcm_ccs.session import SessionManager, default_message_id
from gcm_ccs.stanza_filter import StanzaFilter

__version__ = "0.1.0"
__all__ = [
    "SessionManager",
    "MessageRouter",
    "MessageHandlers",
    "MessageCodec",
    "DrainController",
    "StanzaFilter",
    "CcsSettings",
    "ConnectionConfig",
    "load_settings",
    "save_settings",
    "create_message",
    "decode",
    "encode_ack",
    "encode_downstream",
    "parse_message",
    "default_message_id",
    "DownstreamMessage",
    "InboundMessage",
    "UpstreamMessage",
    "AckMessage",
    "NackMessage",
    "ControlMessage",
    "UnknownMessage",
    "MessageType",
    "ControlType",
    "Stanza",
    "Message",
    "CcsError",
    "EncodeError",
    "DecodeError",
    "SendFailed",
    "ConnectError",
    "TransportError",
    "NotConnectedError",
    "AuthenticationError",
]
