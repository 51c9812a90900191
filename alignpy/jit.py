import os

_TRUE_VALUES = ('y', 'yes', 't', 'true', 'on', '1')


def _strtobool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


CACHE_JIT = _strtobool(os.getenv('PYTHON_CACHEJIT', 'False'))
"""bool: Cache numba compiled functions on disk. Set PYTHON_CACHEJIT=1 to enable."""
