# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Open Assets address and asset id presentation.

An Open Assets address is a Bitcoin address whose base58check payload
(version byte and hash) is prefixed with the namespace byte 19.  Asset ids
are shown as base58check strings with version byte 23.
'''

from bitcointx.base58 import Base58Error, CBase58Data

from openassets.lib.errors import InvalidInput

OPEN_ASSETS_NAMESPACE = 19
ASSET_ID_VERSION = 23


def _decode(address) -> bytes:
    if not isinstance(address, str):
        raise InvalidInput(f'address must be a string, got {type(address).__name__}')
    try:
        return CBase58Data(address).to_bytes()
    except Base58Error as e:
        raise InvalidInput(f'invalid base58check address {address!r}: {e}') from e


def _encode(data: bytes) -> str:
    return str(CBase58Data.from_bytes(data))


def address_from_bitcoin_address(address) -> str:
    '''Return the Open Assets address of a base58check Bitcoin address.'''
    return _encode(bytes([OPEN_ASSETS_NAMESPACE]) + _decode(address))


def bitcoin_address_from_address(address) -> str:
    '''Return the Bitcoin address an Open Assets address was derived from.'''
    data = _decode(address)
    if not data or data[0] != OPEN_ASSETS_NAMESPACE:
        raise InvalidInput(f'{address!r} is not an Open Assets address')
    return _encode(data[1:])


def asset_id_to_base58(asset_id) -> str:
    if not isinstance(asset_id, (bytes, bytearray)) or len(asset_id) != 20:
        raise InvalidInput(f'asset id must be 20 bytes, got {asset_id!r}')
    return _encode(bytes([ASSET_ID_VERSION]) + bytes(asset_id))
