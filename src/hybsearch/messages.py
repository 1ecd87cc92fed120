"""
Session wire messages.

Every message on the session connection is a JSON ``{type, payload}``
envelope. Inbound envelopes are decoded once, here, into one of a closed set
of models; anything with an unknown ``type`` becomes an UnrecognizedMessage
that still carries the raw payload.
"""

import json
from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hybsearch.errors import ProtocolError


class StageStart(BaseModel):
    """A pipeline stage has started on the server."""
    type: ClassVar[str] = "stage-start"

    stage: str


class StageComplete(BaseModel):
    """A pipeline stage finished; ``result`` is text or any JSON value."""
    type: ClassVar[str] = "stage-complete"
    model_config = ConfigDict(populate_by_name=True)

    stage: str
    time_taken: Optional[float] = Field(default=None, alias="timeTaken")
    result: Any = None
    cached: bool = False


class ServerError(BaseModel):
    """The server gave up on the run."""
    type: ClassVar[str] = "error"

    error: Any = None


class Exit(BaseModel):
    """The server finished the run."""
    type: ClassVar[str] = "exit"


class UnrecognizedMessage(BaseModel):
    type: str
    payload: Any = None


Envelope = Union[StageStart, StageComplete, ServerError, Exit, UnrecognizedMessage]

ENVELOPE_TYPES = {
    model.type: model
    for model in (StageStart, StageComplete, ServerError, Exit)
}


class StartCommand(BaseModel):
    """The single command a client sends to begin a run."""
    type: str = "start"
    pipeline: str
    filepath: str
    data: str

    def encode(self) -> str:
        return json.dumps(self.model_dump())


def decode_envelope(raw: Union[str, bytes]) -> Envelope:
    """Decode one inbound message.

    Raises:
        ProtocolError: If the message is not a JSON object with a string
            ``type``, or a known type's payload does not match its model.
    """
    try:
        packet = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Message is not valid JSON: {e}") from e

    if not isinstance(packet, dict):
        raise ProtocolError(f"Message is not an object: {packet!r}")

    message_type = packet.get("type")
    if not isinstance(message_type, str):
        raise ProtocolError(f"Message has no type: {packet!r}")

    payload = packet.get("payload")

    model = ENVELOPE_TYPES.get(message_type)
    if model is None:
        return UnrecognizedMessage(type=message_type, payload=payload)

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ProtocolError(f'Payload of "{message_type}" is not an object: {payload!r}')

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ProtocolError(f'Invalid "{message_type}" payload: {e}') from e
