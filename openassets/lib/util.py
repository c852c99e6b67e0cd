# Copyright (c) 2024, the openassets authors
#
# All rights reserved.
#
# See the file "LICENCE" for information about the copyright
# and warranty status of this software.

'''Miscellaneous utility classes and functions.'''

import logging

import aiorpcx


def class_logger(path, classname):
    '''Return a hierarchical logger for a class.'''
    return logging.getLogger(path).getChild(classname)


class OldTaskGroup(aiorpcx.TaskGroup):
    '''Automatically raises exceptions on join; as in aiorpcx prior to version 0.20.

    When used as a context manager, the first exception raised by any task is
    re-raised out of the block and the remaining tasks are cancelled, so that

        async with OldTaskGroup() as group:
            await group.spawn(task1())
            await group.spawn(task2())

    behaves like spawning both and then calling task.result() on each.
    '''
    async def join(self):
        if self._wait is all:
            exc = False
            try:
                async for task in self:
                    if not task.cancelled():
                        task.result()
            except BaseException:  # including asyncio.CancelledError
                exc = True
                raise
            finally:
                if exc:
                    await self.cancel_remaining()
                await super().join()
        else:
            await super().join()
            if self.completed:
                self.completed.result()


def hash_to_hex_str(x):
    '''Convert a big-endian binary hash to displayed hex string.

    Display form of a binary hash is reversed and converted to hex.
    '''
    return bytes(reversed(x)).hex()
