"""
Stanza filter shared by the inbound listener and the outbound interceptor.
"""

from gcm_ccs.models.stanza import Stanza


class StanzaFilter:
    """Accepts bare stanzas and anything addressed under the project id."""

    def __init__(self, project_id: str):
        self._project_id = project_id

    @property
    def project_id(self) -> str:
        return self._project_id

    def accept(self, stanza: Stanza) -> bool:
        if type(stanza) is Stanza:
            return True
        if stanza.to is not None and str(stanza.to).startswith(self._project_id):
            return True
        return False

    def __call__(self, stanza: Stanza) -> bool:
        return self.accept(stanza)
