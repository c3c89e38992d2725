"""Response intake - accepts responses submitted by clients."""

from __future__ import annotations

import logging

from .errors import UnknownClientError
from .models import RpcResponse
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class ResponseIntake:
    """Forwards submitted responses to the submitting client's correlator.

    Acknowledgement is independent of correlation: a response with no
    matching pending request is dropped without an error, since the
    submitter cannot know the server's pending state.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry

    def submit(self, client_id: str | None, response: RpcResponse) -> bool:
        """Deliver ``response`` from ``client_id``.

        Returns:
            True if it resolved a pending request, False if it was dropped

        Raises:
            UnknownClientError: If the client has no live session
        """
        session = self._registry.lookup(client_id)
        if session is None:
            logger.warning(f"Response {response.id} from unknown client {client_id}")
            raise UnknownClientError(client_id)

        matched = session.correlator.resolve(response.id, response)
        if matched:
            logger.debug(f"Received response {response.id} from {client_id}")
        return matched
