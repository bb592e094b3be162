"""
Node Module - Pydantic Schemas and wire codec
"""
import struct
from typing import Any, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from input_node.core.exceptions import CommandDecodeError

UPDATE_TARGET = "updateTarget"
UDP_PING = "udpPing"


# ============== Identity & Telemetry ==============

class NodeIdentity(BaseModel):
    """Labels attached to every outgoing reading."""
    model_config = ConfigDict(frozen=True)

    area: str
    flow_name: str


class TelemetryMeta(BaseModel):
    flow_name: str
    execution_area: str


class TelemetryEnvelope(BaseModel):
    """Outbound telemetry datagram."""
    message: str
    meta: TelemetryMeta

    @classmethod
    def for_reading(cls, reading: int, identity: NodeIdentity) -> "TelemetryEnvelope":
        return cls(
            message=str(reading),
            meta=TelemetryMeta(flow_name=identity.flow_name, execution_area=identity.area),
        )

    def encode(self) -> bytes:
        return orjson.dumps(self.model_dump())


# ============== Commands ==============

class UpdateTargetCommand(BaseModel):
    """Redirect telemetry to a new host and rebased port."""
    type: Literal["updateTarget"]
    target: StrictStr
    target_port_base: StrictInt = Field(..., ge=0, le=65535)


class PingCommand(BaseModel):
    """Latency probe answered with a raw timestamp."""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["udpPing"]
    reply_to: StrictStr = Field(..., alias="replyTo")


InboundCommand = UpdateTargetCommand | PingCommand

COMMAND_TYPES: dict[str, type[BaseModel]] = {
    UPDATE_TARGET: UpdateTargetCommand,
    UDP_PING: PingCommand,
}


class UpdateTargetAck(BaseModel):
    """Acknowledgment for a successful updateTarget."""
    type: Literal["updateTarget"] = UPDATE_TARGET
    success: bool = True

    def encode(self) -> bytes:
        return orjson.dumps(self.model_dump())


# ============== Codec ==============

def decode_text(payload: bytes) -> str:
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CommandDecodeError(
            "Couldn't decode datagram as UTF-8",
            details={"error": str(e), "length": len(payload)},
        ) from e


def decode_command(text: str) -> InboundCommand | None:
    """
    Decode one command datagram.

    Returns None for JSON that carries no recognised ``type``.
    Raises CommandDecodeError for malformed JSON or missing/invalid fields.
    """
    try:
        data: Any = orjson.loads(text)
    except orjson.JSONDecodeError as e:
        raise CommandDecodeError(
            "Couldn't parse JSON",
            details={"error": str(e), "payload": text[:80]},
        ) from e

    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        return None
    model = COMMAND_TYPES.get(data["type"])
    if model is None:
        return None

    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError as e:
        raise CommandDecodeError(
            f"Invalid {data['type']} command",
            details={
                "validation_errors": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in e.errors()
                ]
            },
        ) from e


def encode_timestamp(micros: int) -> bytes:
    """8-byte big-endian unsigned microsecond timestamp."""
    return struct.pack(">Q", micros)
