"""Process-wide cached factories.

``get_app_config`` is decorated with ``singleton`` so every caller, and
the lifespan, see the same ``AppConfig``.  After patching the environment
a test calls ``get_app_config.reset()`` to have the next call rebuild it.
"""

import functools
import threading

_UNSET = object()


def singleton(func):
    """Cache the first result of the zero-argument factory *func*."""
    lock = threading.Lock()
    instance = _UNSET

    @functools.wraps(func)
    def wrapper():
        nonlocal instance
        if instance is _UNSET:
            with lock:
                if instance is _UNSET:
                    instance = func()
        return instance

    def reset() -> None:
        nonlocal instance
        with lock:
            instance = _UNSET

    wrapper.reset = reset
    return wrapper
