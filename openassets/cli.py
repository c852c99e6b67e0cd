# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Print the Open Assets color of a transaction output.

The daemon is configured through the environment, see openassets.server.env.
'''

import argparse
import asyncio
import json
import logging
import sys

from openassets.lib.coloring_engine import ColoringEngine
from openassets.lib.errors import OpenAssetsError
from openassets.server.daemon import Daemon
from openassets.server.env import Env
from openassets.version import openassets_version


async def color_output(daemon, tx_hash, output_index):
    engine = ColoringEngine(daemon.transaction_provider)
    return await engine.get_output(tx_hash, output_index)


async def run(env, tx_hash, output_index):
    async with Daemon.from_env(env) as daemon:
        return await color_output(daemon, tx_hash, output_index)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Show the asset id and asset quantity of a transaction output')
    parser.add_argument('--version', action='version', version=openassets_version)
    parser.add_argument('tx_hash', help='transaction hash, in hex')
    parser.add_argument('output_index', type=int, help='index of the output')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        env = Env()
    except Env.Error as e:
        logging.error(f'configuration error: {e}')
        return 1
    logging.getLogger().setLevel(env.log_level)

    try:
        output = asyncio.run(run(env, args.tx_hash, args.output_index))
    except OpenAssetsError as e:
        logging.error(f'{args.tx_hash}:{args.output_index}: {e}')
        return 1

    print(json.dumps(output.to_json(), indent=4))
    return 0


if __name__ == '__main__':
    sys.exit(main())
