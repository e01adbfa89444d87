"""Process helpers."""

import os
import signal
import threading

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)
_only_once = threading.Lock()


def setup_signal_handler() -> threading.Event:
    """Handle SIGINT and SIGTERM; return an event set on the first of them.

    A second signal ends the process at once with exit code 1. Calling this
    function twice raises RuntimeError.
    """
    if not _only_once.acquire(blocking=False):
        raise RuntimeError("signal handler has already been set up")

    stop = threading.Event()

    def _handle(signum, frame):
        if stop.is_set():
            os._exit(1)
        stop.set()

    for sig in _SHUTDOWN_SIGNALS:
        signal.signal(sig, _handle)
    return stop