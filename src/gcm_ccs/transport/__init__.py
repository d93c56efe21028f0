"""Stanza channel contract and implementations."""

from gcm_ccs.transport.base import ConnectionListener, StanzaChannel
from gcm_ccs.transport.loopback import LoopbackChannel

__all__ = ["ConnectionListener", "StanzaChannel", "LoopbackChannel"]
