# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Transaction outputs annotated with their Open Assets color.

An output is one of four kinds.  Uncolored and Marker outputs never carry an
asset; Issuance and Transfer outputs carry an asset id and quantity, both of
which are None when the output received no asset units.
'''

import enum

import attr

from openassets.lib.errors import InvalidInput
from openassets.lib.marker_output import MAX_ASSET_QUANTITY, is_valid_asset_quantity

ASSET_ID_LEN = 20


class OutputType(enum.IntEnum):
    UNCOLORED = 0
    MARKER_OUTPUT = 1
    ISSUANCE = 2
    TRANSFER = 3


def _to_script(value):
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidInput(f'script must be bytes, got {type(value).__name__}')
    return bytes(value)


def _check_value(instance, attribute, value):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInput(f'output value must be a non-negative integer, got {value!r}')


def _check_asset_id(instance, attribute, value):
    if value is None:
        return
    if not isinstance(value, bytes) or len(value) != ASSET_ID_LEN:
        raise InvalidInput(f'asset id must be {ASSET_ID_LEN} bytes, got {value!r}')


def _check_asset_quantity(instance, attribute, value):
    if value is not None and not is_valid_asset_quantity(value):
        raise InvalidInput(
            f'Asset quantity out of supported range (0-{MAX_ASSET_QUANTITY}): {value!r}')


@attr.s(slots=True, frozen=True)
class ColoredOutput:
    value = attr.ib(validator=_check_value)
    script = attr.ib(converter=_to_script)

    output_type = OutputType.UNCOLORED
    asset_id = None
    asset_quantity = None

    def __str__(self):
        asset_id = self.asset_id.hex() if self.asset_id is not None else None
        return (f'ColoredOutput(value={self.value}, script={self.script.hex()}, '
                f'asset_id={asset_id}, asset_quantity={self.asset_quantity}, '
                f'output_type={self.output_type.name})')

    def to_json(self):
        return {
            'value': self.value,
            'script': self.script.hex(),
            'asset_id': self.asset_id.hex() if self.asset_id is not None else None,
            'asset_quantity': self.asset_quantity,
            'output_type': self.output_type.name,
        }


@attr.s(slots=True, frozen=True)
class Uncolored(ColoredOutput):
    output_type = OutputType.UNCOLORED


@attr.s(slots=True, frozen=True)
class Marker(ColoredOutput):
    output_type = OutputType.MARKER_OUTPUT


@attr.s(slots=True, frozen=True)
class Issuance(ColoredOutput):
    asset_id = attr.ib(default=None, validator=_check_asset_id)
    asset_quantity = attr.ib(default=None, validator=_check_asset_quantity)

    output_type = OutputType.ISSUANCE


@attr.s(slots=True, frozen=True)
class Transfer(ColoredOutput):
    asset_id = attr.ib(default=None, validator=_check_asset_id)
    asset_quantity = attr.ib(default=None, validator=_check_asset_quantity)

    output_type = OutputType.TRANSFER
