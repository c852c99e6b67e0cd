# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Class for handling environment configuration and defaults.'''

import logging
from os import environ


class Env:
    '''Wraps environment configuration.'''

    class Error(Exception):
        pass

    def __init__(self):
        self.daemon_url = self.required('DAEMON_URL')
        self.daemon_timeout = self.floating('DAEMON_TIMEOUT', 30.0)
        self.daemon_max_retries = self.integer('DAEMON_MAX_RETRIES', 3)
        self.daemon_retry_delay = self.floating('DAEMON_RETRY_DELAY', 0.5)
        self.log_level = self.log_level_from_env('LOG_LEVEL', 'info')

        if self.daemon_timeout <= 0:
            raise self.Error('DAEMON_TIMEOUT must be positive')
        if self.daemon_max_retries < 0:
            raise self.Error('DAEMON_MAX_RETRIES cannot be negative')

    @classmethod
    def default(cls, envvar, default):
        return environ.get(envvar, default)

    @classmethod
    def required(cls, envvar):
        value = environ.get(envvar)
        if value is None:
            raise cls.Error(f'required envvar {envvar} not set')
        return value

    @classmethod
    def integer(cls, envvar, default):
        value = environ.get(envvar)
        if value is None:
            return default
        try:
            return int(value)
        except Exception:
            raise cls.Error(f'cannot convert envvar {envvar} value {value} to an integer')

    @classmethod
    def floating(cls, envvar, default):
        value = environ.get(envvar)
        if value is None:
            return default
        try:
            return float(value)
        except Exception:
            raise cls.Error(f'cannot convert envvar {envvar} value {value} to a number')

    @classmethod
    def log_level_from_env(cls, envvar, default):
        value = cls.default(envvar, default).strip().upper()
        level = logging.getLevelName(value)
        if not isinstance(level, int):
            raise cls.Error(f'unknown log level {value} in envvar {envvar}')
        return level
