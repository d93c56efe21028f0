"""
Stanzas exchanged over the CCS stream.

CCS embeds its JSON payload in a ``<gcm xmlns="google:mobile:data">``
element inside an XMPP ``<message>``.
"""

from typing import Optional
from xml.sax.saxutils import escape, quoteattr

GCM_NAMESPACE = "google:mobile:data"
GCM_ELEMENT = "gcm"


class Stanza:
    """Base protocol frame."""

    __slots__ = ("to", "from_", "stanza_id")

    element = "stanza"

    def __init__(self, to: Optional[str] = None, from_: Optional[str] = None, stanza_id: Optional[str] = None):
        self.to = to
        self.from_ = from_
        self.stanza_id = stanza_id

    def _attrs(self) -> str:
        attrs = ""
        if self.to is not None:
            attrs += f" to={quoteattr(str(self.to))}"
        if self.from_ is not None:
            attrs += f" from={quoteattr(str(self.from_))}"
        if self.stanza_id is not None:
            attrs += f" id={quoteattr(self.stanza_id)}"
        return attrs

    def to_xml(self) -> str:
        return f"<{self.element}{self._attrs()}/>"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(to={self.to!r}, from_={self.from_!r})"


class Message(Stanza):
    """Message stanza carrying a CCS JSON payload."""

    __slots__ = ("json",)

    element = "message"

    def __init__(
        self,
        json: Optional[str] = None,
        to: Optional[str] = None,
        from_: Optional[str] = None,
        stanza_id: Optional[str] = None,
    ):
        super().__init__(to=to, from_=from_, stanza_id=stanza_id)
        self.json = json

    def to_xml(self) -> str:
        if self.json is None:
            return super().to_xml()
        return (
            f"<{self.element}{self._attrs()}>"
            f"<{GCM_ELEMENT} xmlns=\"{GCM_NAMESPACE}\">{escape(self.json)}</{GCM_ELEMENT}>"
            f"</{self.element}>"
        )
