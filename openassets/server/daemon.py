# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Transaction lookups against a bitcoind JSON-RPC interface.'''

import asyncio
import itertools
import json

import aiohttp

from openassets.lib.util import class_logger


class DaemonError(Exception):
    '''Raised when the daemon returns an error in its results.'''


class WarmingUpError(Exception):
    '''Internal - when the daemon is warming up.'''


class ServiceRefusedError(Exception):
    '''Internal - when the daemon doesn't provide a JSON response, only an HTTP error, for
    some reason.'''


class Daemon:
    '''Handles connections to a daemon at the given URL.

    Connection problems are retried max_retries times, sleeping retry_delay
    seconds after the first failure and doubling that up to max_retry_delay.
    '''

    WARMING_UP = -28
    id_counter = itertools.count()

    def __init__(self, url, *, timeout=30.0, max_retries=3, retry_delay=0.5,
                 max_retry_delay=4.0):
        self.logger = class_logger(__name__, self.__class__.__name__)
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.session = None

    @classmethod
    def from_env(cls, env):
        return cls(env.daemon_url, timeout=env.daemon_timeout,
                   max_retries=env.daemon_max_retries,
                   retry_delay=env.daemon_retry_delay)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.close()

    async def close(self):
        if self.session is not None:
            await self.session.close()
            self.session = None

    def logged_url(self):
        '''The host and port part, for logging.'''
        url = self.url
        return url[url.rindex('@') + 1:] if '@' in url else url

    async def _send_data(self, data):
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
        async with self.session.post(self.url, data=data) as resp:
            kind = resp.headers.get('Content-Type', None)
            if kind == 'application/json':
                return await resp.json()
            text = await resp.text()
            text = text.strip() or resp.reason
            raise ServiceRefusedError(text)

    async def _send(self, payload, processor):
        '''Send a payload to be converted to JSON.

        Handles temporary connection issues.  Daemon response errors
        are raised through DaemonError.
        '''
        secs = self.retry_delay
        attempt = 0
        while True:
            try:
                result = await self._send_data(payload)
                return processor(result)
            except asyncio.TimeoutError:
                error = 'timeout error'
            except aiohttp.ServerDisconnectedError:
                error = 'disconnected'
            except aiohttp.ClientConnectionError:
                error = 'connection problem - check your daemon is running'
            except ServiceRefusedError as e:
                error = f'daemon service refused: {e}'
            except WarmingUpError:
                error = 'starting up checking blocks'

            attempt += 1
            if attempt > self.max_retries:
                self.logger.error(f'{error} from {self.logged_url()}; giving up')
                raise DaemonError(error)
            self.logger.warning(f'{error} from {self.logged_url()}; retrying in {secs:.2f}s')
            await asyncio.sleep(secs)
            secs = min(self.max_retry_delay, secs * 2)

    def _check_result(self, result):
        err = result.get('error')
        if not err:
            return result.get('result')
        if err.get('code') == self.WARMING_UP:
            raise WarmingUpError
        raise DaemonError(err)

    async def _send_single(self, method, params=None):
        '''Send a single request to the daemon.'''
        payload = {'method': method, 'id': next(self.id_counter)}
        if params:
            payload['params'] = params
        return await self._send(json.dumps(payload), self._check_result)

    async def getrawtransaction(self, hex_hash, verbose=False):
        '''Return the serialized raw transaction with the given hash.'''
        return await self._send_single('getrawtransaction', (hex_hash, int(verbose)))

    async def transaction_provider(self, hex_hash):
        '''Look up a transaction for the coloring engine.

        Returns {'result': raw_tx_hex} on success and {'error': message}
        when the daemon reports an error.
        '''
        try:
            raw_tx = await self.getrawtransaction(hex_hash)
        except DaemonError as e:
            err = e.args[0]
            if isinstance(err, dict):
                err = err.get('message', err)
            return {'error': str(err)}
        return {'result': raw_tx}
