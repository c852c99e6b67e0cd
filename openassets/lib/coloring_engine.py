# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Backtracking engine computing the asset id and quantity of any output.

The color of an output depends on the colors of the outputs spent by its
transaction, so coloring a transaction walks back through the inputs until
it reaches transactions without a marker output.  Nothing is cached: every
query re-resolves the full ancestry it needs.
'''

from collections.abc import Mapping
from typing import List, Optional, Sequence

from bitcointx.core import CTransaction
from bitcointx.core.serialize import Hash160, SerializationError

from openassets.lib import address
from openassets.lib.errors import DeserializationError, IndexOutOfRange, LookupFailed
from openassets.lib.marker_output import deserialize_payload, parse_script
from openassets.lib.outputs import ColoredOutput, Issuance, Marker, Transfer, Uncolored
from openassets.lib.util import OldTaskGroup, class_logger, hash_to_hex_str


def hash_script(data) -> bytes:
    '''Hash a script into an asset id: RIPEMD160(SHA256(data)).'''
    return Hash160(bytes(data))


def compute_asset_ids(
    inputs: Sequence[ColoredOutput],
    marker_output_index: int,
    outputs,
    asset_quantities: Sequence[int],
) -> Optional[List[ColoredOutput]]:
    '''Assign asset ids and quantities to the outputs of a transaction.

    inputs: the colored outputs spent by the transaction, in input order
    marker_output_index: position of the marker output in outputs
    outputs: the transaction outputs (nValue and scriptPubKey)
    asset_quantities: the quantity list of the marker output

    Returns the colored outputs, or None if the transaction breaks the
    protocol rules, in which case all its outputs are uncolored.
    '''
    if len(asset_quantities) > len(outputs) - 1:
        return None
    if not inputs:
        return None

    result = []

    # Issuance outputs
    issuance_asset_id = hash_script(inputs[0].script)
    for i in range(marker_output_index):
        txout = outputs[i]
        quantity = asset_quantities[i] if i < len(asset_quantities) else 0
        if quantity > 0:
            result.append(Issuance(txout.nValue, txout.scriptPubKey, issuance_asset_id, quantity))
        else:
            result.append(Issuance(txout.nValue, txout.scriptPubKey))

    txout = outputs[marker_output_index]
    result.append(Marker(txout.nValue, txout.scriptPubKey))

    # Transfer outputs.  The input cursor is shared by all of them: units left
    # over in an input go to the next output.
    input_index = -1
    input_units_left = 0
    for i in range(marker_output_index + 1, len(outputs)):
        txout = outputs[i]
        quantity = asset_quantities[i - 1] if i - 1 < len(asset_quantities) else 0
        units_needed = quantity
        asset_id = None

        while units_needed > 0:
            if input_units_left == 0:
                input_index += 1
                if input_index >= len(inputs):
                    # Not enough asset units in the inputs
                    return None
                input_units_left = inputs[input_index].asset_quantity or 0

            current_input = inputs[input_index]
            if current_input.asset_id is None or input_units_left == 0:
                input_units_left = 0
                continue

            progress = min(input_units_left, units_needed)
            units_needed -= progress
            input_units_left -= progress

            if asset_id is None:
                asset_id = current_input.asset_id
            elif asset_id != current_input.asset_id:
                # An output cannot hold two different assets
                return None

        if quantity > 0:
            result.append(Transfer(txout.nValue, txout.scriptPubKey, asset_id, quantity))
        else:
            result.append(Transfer(txout.nValue, txout.scriptPubKey))

    return result


def uncolored_outputs(tx) -> List[ColoredOutput]:
    return [Uncolored(txout.nValue, txout.scriptPubKey) for txout in tx.vout]


class ColoringEngine:
    '''Find the asset id and asset quantity of transaction outputs.

    transaction_provider is an async callable taking a transaction hash as a
    hex string and returning a mapping; on success its 'result' entry holds
    the raw transaction in hex, on failure it has an 'error' or 'message'
    entry, or the callable raises.
    '''

    hash_script = staticmethod(hash_script)
    compute_asset_ids = staticmethod(compute_asset_ids)
    address_from_bitcoin_address = staticmethod(address.address_from_bitcoin_address)

    def __init__(self, transaction_provider):
        self.logger = class_logger(__name__, self.__class__.__name__)
        self.transaction_provider = transaction_provider

    async def get_output(self, tx_hash, output_index: int) -> ColoredOutput:
        '''Return the output at output_index of a transaction, with its color.

        tx_hash is a hex string, or 32 bytes in internal byte order.
        '''
        if isinstance(tx_hash, (bytes, bytearray)):
            tx_hash = hash_to_hex_str(tx_hash)
        tx = await self._fetch_transaction(tx_hash)
        outputs = await self.color_transaction(tx)

        if (isinstance(output_index, bool) or not isinstance(output_index, int)
                or not 0 <= output_index < len(outputs)):
            raise IndexOutOfRange(
                f'No data for output matching index {output_index} in {tx_hash}')
        return outputs[output_index]

    async def color_transaction(self, tx) -> List[ColoredOutput]:
        '''Compute the asset id and quantity of every output of tx.'''
        # Coinbase outputs can never be colored
        if tx.is_coinbase():
            return uncolored_outputs(tx)

        found = self._find_marker_output(tx)
        if found is None:
            return uncolored_outputs(tx)
        marker_output_index, marker_output = found

        inputs = await self._resolve_inputs(tx)
        result = compute_asset_ids(
            inputs, marker_output_index, tx.vout, marker_output.asset_quantities)
        if result is None:
            self.logger.debug(
                f'invalid Open Assets transaction {hash_to_hex_str(tx.GetTxid())}; '
                f'all outputs are uncolored')
            return uncolored_outputs(tx)
        return result

    def _find_marker_output(self, tx):
        '''Return (index, MarkerOutput) for the first valid marker output.

        Later outputs that would also qualify are ordinary outputs.
        '''
        for index, txout in enumerate(tx.vout):
            payload = parse_script(txout.scriptPubKey)
            if payload is None:
                continue
            try:
                marker_output = deserialize_payload(payload)
            except DeserializationError as e:
                self.logger.debug(f'output {index} is not a valid marker output: {e}')
                continue
            self.logger.debug(f'marker output found at index {index}: {marker_output}')
            return index, marker_output
        return None

    async def _resolve_inputs(self, tx) -> List[ColoredOutput]:
        tasks = []
        async with OldTaskGroup() as group:
            for txin in tx.vin:
                tasks.append(await group.spawn(self._resolve_input(txin.prevout)))

        inputs = [task.result() for task in tasks]
        if len(inputs) != len(tx.vin):
            raise LookupFailed(
                f'resolved {len(inputs)} outputs for {len(tx.vin)} inputs')
        return inputs

    async def _resolve_input(self, prevout) -> ColoredOutput:
        # A spent output missing from its parent is a failed lookup, not a
        # bad index on the caller's side
        try:
            return await self.get_output(prevout.hash, prevout.n)
        except IndexOutOfRange as e:
            raise LookupFailed(f'spent output cannot be resolved: {e}') from e

    async def _fetch_transaction(self, tx_hash: str):
        self.logger.debug(f'looking up transaction {tx_hash}')
        try:
            response = await self.transaction_provider(tx_hash)
        except Exception as e:
            raise LookupFailed(f'lookup of transaction {tx_hash} failed: {e}') from e

        if not response or not isinstance(response, Mapping):
            raise LookupFailed('Transaction could not be retrieved.')

        # Propagate the error message of the underlying RPC call
        error = response.get('error') or response.get('message')
        if error:
            if isinstance(error, Mapping):
                error = error.get('message', error)
            raise LookupFailed(str(error))

        raw_tx = response.get('result')
        if not raw_tx:
            raise LookupFailed('Transaction could not be retrieved.')

        try:
            if isinstance(raw_tx, str):
                raw_tx = bytes.fromhex(raw_tx)
            return CTransaction.deserialize(bytes(raw_tx))
        except (SerializationError, ValueError, TypeError) as e:
            raise LookupFailed(f'transaction {tx_hash} could not be parsed: {e}') from e
