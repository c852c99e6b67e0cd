# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Unsigned LEB128 variable-length integers.

Asset quantities in a marker output are encoded as little-endian base-128
groups: seven value bits per byte, least significant group first, with the
high bit of every byte except the last set to signal continuation.

This is not the compact-size encoding used for list lengths in transactions
and in the marker payload itself.
'''

from typing import Tuple

from openassets.lib.errors import InvalidInput

# Largest magnitude a quantity can have on the wire without losing bits.
MAX_EXACT_VALUE = 2**64 - 1


def encode(value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f'LEB128 value must be an integer, got {value!r}')
    if value < 0:
        raise InvalidInput('Negative values are not supported')

    result = bytearray()
    while True:
        group = value & 0x7f
        value >>= 7
        if value:
            result.append(group | 0x80)
        else:
            result.append(group)
            return bytes(result)


def decode(data, offset: int = 0) -> Tuple[int, int, bool]:
    '''Decode one LEB128 integer starting at offset.

    Returns (value, next_offset, lossy); next_offset is the index of the
    first byte after the encoded value, lossy is set when the value does not
    fit the 64-bit range quantities are defined over.
    '''
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidInput('Data to decode must be a bytes object')
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise InvalidInput(f'offset must be an integer, got {offset!r}')
    if offset < 0 or offset >= len(data):
        raise InvalidInput(f'offset {offset} out of range for {len(data)} bytes')

    value = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise InvalidInput(f'truncated LEB128 value at offset {offset}')
        byte = data[pos]
        pos += 1
        value |= (byte & 0x7f) << shift
        shift += 7
        if not byte & 0x80:
            break

    return value, pos, value > MAX_EXACT_VALUE


def decode_value(data, offset: int = 0) -> int:
    return decode(data, offset)[0]
