# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''The Open Assets marker output.

The marker output is what makes a transaction an Open Assets transaction. It
is a provably unspendable output whose script is OP_RETURN followed by a
single push of the payload

    tag (0x4f41) | version (0x0100) | count | count x LEB128 quantity |
    metadata length | metadata

where count and metadata length are compact-size integers.
'''

import struct
from io import BytesIO
from typing import Optional

import attr
from bitcointx.core.script import OP_RETURN, CScript, CScriptInvalidError
from bitcointx.core.serialize import (
    BytesSerializer,
    SerializationError,
    VarIntSerializer,
    ser_read,
)

from openassets.lib import leb128
from openassets.lib.errors import DeserializationError, InvalidInput

OPEN_ASSETS_TAG = 0x4f41
OPEN_ASSETS_VERSION = 0x0100
MAX_ASSET_QUANTITY = 2**63 - 1

MARKER_PREFIX = struct.pack('>HH', OPEN_ASSETS_TAG, OPEN_ASSETS_VERSION)


def is_valid_asset_quantity(quantity):
    return (not isinstance(quantity, bool) and isinstance(quantity, int)
            and 0 <= quantity <= MAX_ASSET_QUANTITY)


def _to_quantities(value):
    if value is None:
        return ()
    try:
        return tuple(value)
    except TypeError:
        raise InvalidInput(f'asset quantities must be a sequence, got {value!r}') from None


def _to_metadata(value):
    if value is None:
        return b''
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidInput(f'metadata must be bytes, got {type(value).__name__}')
    return bytes(value)


def _check_quantities(instance, attribute, value):
    for quantity in value:
        if not is_valid_asset_quantity(quantity):
            raise InvalidInput(
                f'Asset quantity {quantity!r} is not an integer between 0 and '
                f'the maximum allowed ({MAX_ASSET_QUANTITY})')


@attr.s(slots=True, frozen=True)
class MarkerOutput:
    '''Asset quantities and metadata carried by a marker output.

    asset_quantities has one entry per output, in output order, skipping the
    marker output itself.
    '''
    asset_quantities = attr.ib(converter=_to_quantities, validator=_check_quantities)
    metadata = attr.ib(default=b'', converter=_to_metadata)

    def serialize_payload(self) -> bytes:
        f = BytesIO()
        f.write(MARKER_PREFIX)
        VarIntSerializer.stream_serialize(len(self.asset_quantities), f)
        for quantity in self.asset_quantities:
            f.write(leb128.encode(quantity))
        BytesSerializer.stream_serialize(self.metadata, f)
        return f.getvalue()

    @classmethod
    def deserialize_payload(cls, payload) -> 'MarkerOutput':
        return deserialize_payload(payload)


def serialize_payload(asset_quantities, metadata=b'') -> bytes:
    return MarkerOutput(asset_quantities, metadata).serialize_payload()


def deserialize_payload(payload) -> MarkerOutput:
    '''Decode a marker output payload.

    Raises DeserializationError if the payload is malformed or truncated, or
    if a quantity is out of range.  Bytes after the metadata are ignored.
    '''
    if not isinstance(payload, (bytes, bytearray)):
        raise DeserializationError(
            f'Deserialization error: payload must be bytes, got {type(payload).__name__}')
    payload = bytes(payload)
    f = BytesIO(payload)
    try:
        prefix = ser_read(f, len(MARKER_PREFIX))
        if prefix != MARKER_PREFIX:
            raise DeserializationError(
                f'Deserialization error: unexpected tag and version {prefix.hex()}')

        count = VarIntSerializer.stream_deserialize(f)
        offset = f.tell()
        asset_quantities = []
        for _ in range(count):
            quantity, offset, lossy = leb128.decode(payload, offset)
            if lossy or quantity > MAX_ASSET_QUANTITY:
                raise InvalidInput(f'asset quantity {quantity} exceeds {MAX_ASSET_QUANTITY}')
            asset_quantities.append(quantity)

        f.seek(offset)
        metadata = BytesSerializer.stream_deserialize(f)
    except (SerializationError, InvalidInput) as e:
        raise DeserializationError(f'Deserialization error: {e}') from e

    return MarkerOutput(asset_quantities, metadata)


def build_script(payload) -> bytes:
    '''Return the OP_RETURN script carrying payload as its only push.'''
    if not isinstance(payload, (bytes, bytearray)):
        raise InvalidInput(f'payload must be bytes, got {type(payload).__name__}')
    return CScript([OP_RETURN, bytes(payload)])


def parse_script(script) -> Optional[bytes]:
    '''Return the marker payload pushed by script, or None.

    None means the output is an ordinary output: the script does not start
    with OP_RETURN, does not consist of exactly one push after it, or the
    pushed data does not start with the Open Assets tag and version.
    '''
    if not isinstance(script, (bytes, bytearray)):
        return None
    try:
        ops = list(CScript(bytes(script)).raw_iter())
    except CScriptInvalidError:
        return None

    if len(ops) != 2:
        return None
    (opcode, _, _), (_, payload, _) = ops
    if opcode != OP_RETURN or payload is None:
        return None
    if not payload.startswith(MARKER_PREFIX):
        return None
    return payload
