"""
Filesystem change notifications for the configuration directory.

Each live update connection owns one `ChangeWatcher`, which holds one inotify
instance watching the directory for as long as the connection is open. The
inotify file descriptor is read from the event loop itself, so an idle watch
costs no thread. Changes are coalesced: however many files are created or
modified between two reads, the reader sees a single `ChangeNotification`.
"""

import asyncio
import ctypes
import errno
import logging
import os
from pathlib import Path

from watchdog.observers.inotify_c import (
    InotifyConstants,
    inotify_add_watch,
    inotify_init,
)

from home_services.errors import WatchClosedError, WatchSetupError
from home_services.models import CHANGED, ChangeNotification

_LOGGER = logging.getLogger(__name__)

WATCH_MASK = (
    InotifyConstants.IN_CREATE
    | InotifyConstants.IN_MODIFY
    | InotifyConstants.IN_ONLYDIR
)
# Enough for a few hundred events; the payload is thrown away anyway.
_READ_SIZE = 64 * 1024


def _inotify_error() -> OSError:
    err = ctypes.get_errno()
    if err == errno.ENOSPC:
        return OSError(err, "inotify watch limit reached")
    if err == errno.EMFILE:
        return OSError(err, "inotify instance limit reached")
    return OSError(err, os.strerror(err))


def open_directory_watch(directory: Path) -> int:
    """
    Create a non-blocking inotify instance watching one directory.

    :param Path directory: The directory to watch, not recursively.
    :raises OSError: If the OS refuses the inotify instance or the watch.
    :return int: The inotify file descriptor. Closing it drops the watch.
    """
    fd = inotify_init()
    if fd == -1:
        raise _inotify_error()
    try:
        os.set_blocking(fd, False)
        os.set_inheritable(fd, False)
        if inotify_add_watch(fd, os.fsencode(directory), WATCH_MASK) == -1:
            raise _inotify_error()
    except BaseException:
        os.close(fd)
        raise
    return fd


class WatchTracker:
    """Counts the OS watches currently held by this process."""

    def __init__(self):
        self._active = 0

    @property
    def active(self) -> int:
        return self._active

    def acquire(self) -> None:
        self._active += 1

    def release(self) -> None:
        self._active -= 1


class ChangeWatcher:
    """A single watch on one directory, read as a stream of notifications.

    Usage::

        async with ChangeWatcher(path) as watcher:
            async for _ in watcher:
                ...
    """

    def __init__(self, directory: Path, *, tracker: WatchTracker | None = None):
        self.directory = directory
        self._tracker = tracker
        self._loop: asyncio.AbstractEventLoop | None = None
        self._fd: int | None = None
        self._started = False
        self._error: OSError | None = None
        self._wakeup = asyncio.Event()
        self._changed = False

    async def start(self) -> None:
        """
        Attach the OS watch to the directory.

        :raises WatchSetupError: If the directory is missing or the OS
            refuses the watch.
        """
        if self._started:
            raise RuntimeError("watcher already started")

        if not self.directory.is_dir():
            raise WatchSetupError(
                "setting up watch for config path",
                f"`{self.directory}` is not a directory",
            )

        try:
            fd = open_directory_watch(self.directory)
        except OSError as e:
            raise WatchSetupError("setting up watch for config path", e) from e

        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(fd, self._on_readable)
        self._fd = fd
        self._started = True
        if self._tracker is not None:
            self._tracker.acquire()
        _LOGGER.debug("Watching `%s` for changes", self.directory)

    def _on_readable(self) -> None:
        if self._fd is None:
            return
        try:
            events = os.read(self._fd, _READ_SIZE)
        except BlockingIOError:
            return
        except OSError as e:
            _LOGGER.warning("watch on `%s` failed: %s", self.directory, e)
            self._error = e
            self._release()
            return
        if events:
            self._changed = True
            self._wakeup.set()

    def _release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        if self._loop is not None:
            self._loop.remove_reader(fd)
        os.close(fd)
        if self._tracker is not None:
            self._tracker.release()
        # Wake any reader so it can see the watch has ended.
        self._wakeup.set()

    @property
    def running(self) -> bool:
        return self._fd is not None

    def _raise_if_finished(self) -> None:
        if not self._started:
            raise WatchClosedError("watcher has not been started")
        if self._error is not None:
            raise self._error
        if self._fd is None:
            raise WatchClosedError(f"watch on `{self.directory}` has stopped")

    async def next_change(self) -> ChangeNotification:
        """
        Wait until the directory has changed since the last call.

        :raises WatchClosedError: If the watch has been closed.
        :return ChangeNotification: The change notification.
        """
        while not self._changed:
            self._raise_if_finished()
            self._wakeup.clear()
            await self._wakeup.wait()
        self._changed = False
        return CHANGED

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeNotification:
        try:
            return await self.next_change()
        except WatchClosedError:
            raise StopAsyncIteration

    def close(self) -> None:
        """Stop the watch and release the inotify instance. Safe to call
        more than once."""
        self._release()

    async def __aenter__(self) -> "ChangeWatcher":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()
