"""Wire models for requests pushed to clients and responses they submit."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class RpcRequest(BaseModel):
    """A server-originated request delivered over the push stream.

    Extra payload fields are kept and serialized verbatim.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    method: str
    message: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class RpcResponse(BaseModel):
    """A client-submitted response, correlated to a request by ``id``."""

    id: str
    result: Any = None
    error: Any = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


class ClientIdMessage(BaseModel):
    """First record on every push stream, announcing the client id."""

    type: str = "client_id"
    id: str
