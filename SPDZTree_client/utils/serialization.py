"""
Wire codec for messages exchanged with the SPDZ engines:
 - pack_elements: append fixed-width field elements to a buffer, in order
 - unpack_elements: read an exact number of elements back
 - frame_message / FRAME_HEADER: 8-byte little-endian length prefix per message
 - pack_client_id: raw 4-byte id announced once at connection start

No element count travels on the wire; the receiver knows it from the protocol step.
"""
import struct
from typing import Iterable, List, Optional, Union

from ..errors import WireFormatError
from ..privacy.field import FieldConfig, FieldElement

FRAME_HEADER = struct.Struct("<Q")
CLIENT_ID = struct.Struct("<i")


def pack_elements(elements: Iterable[FieldElement], buffer: Optional[bytearray] = None) -> bytearray:
    if buffer is None:
        buffer = bytearray()
    for e in elements:
        e.pack(buffer)
    return buffer


def unpack_elements(buffer: Union[bytes, bytearray, memoryview], count: int, field: FieldConfig,
                    offset: int = 0) -> List[FieldElement]:
    width = field.element_bytes
    needed = offset + count * width
    if needed > len(buffer):
        raise WireFormatError(
            f"Expected {count} elements ({count * width} bytes) at offset {offset}, "
            f"buffer holds {len(buffer) - offset} bytes"
        )
    return [field.unpack(buffer, offset + i * width) for i in range(count)]


def frame_message(payload: Union[bytes, bytearray]) -> bytes:
    return FRAME_HEADER.pack(len(payload)) + bytes(payload)


def pack_client_id(client_id: int) -> bytes:
    return CLIENT_ID.pack(client_id)
