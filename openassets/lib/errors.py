# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Exceptions raised by the Open Assets codecs and coloring engine.'''


class OpenAssetsError(Exception):
    '''Base class of all openassets errors.'''


class InvalidInput(OpenAssetsError, ValueError):
    '''Raised when a codec or record receives a malformed argument.'''


class DeserializationError(OpenAssetsError):
    '''Raised when a marker output payload cannot be decoded.'''


class LookupFailed(OpenAssetsError):
    '''Raised when a transaction could not be retrieved from the provider.'''


class IndexOutOfRange(OpenAssetsError, IndexError):
    '''Raised when a transaction has no output at the requested index.'''
