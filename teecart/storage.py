"""
Durable storage for carts.

A storage maps a string key to a JSON value, like a browser's local storage.
The cart only talks to this interface, so tests use MemoryCartStorage and the
server uses FileCartStorage (one JSON file per key).

load() returns None for a missing key and raises ValueError / OSError for
data that can't be read; callers decide how to degrade.
"""

import json
import os
import fcntl

from werkzeug.utils import secure_filename


# =============================================================================
# ATOMIC FILE I/O
# =============================================================================
def atomic_write_json(filepath, data):
    tmp = filepath + '.tmp'
    with open(tmp, 'w') as f:
        fcntl.flock(f, fcntl.LOCK_EX)
        json.dump(data, f, indent=2)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, filepath)


def read_json(filepath):
    """Read a JSON file under a shared lock; None if it doesn't exist"""
    if not os.path.exists(filepath):
        return None
    with open(filepath) as f:
        fcntl.flock(f, fcntl.LOCK_SH)
        return json.load(f)


class CartStorage:
    """Key/value store holding JSON-serializable cart data"""

    def load(self, key):
        raise NotImplementedError

    def save(self, key, data):
        raise NotImplementedError


class FileCartStorage(CartStorage):
    """Stores each key as <data_dir>/<key>.json, written atomically"""

    def __init__(self, data_dir):
        self.data_dir = data_dir

    def path_for(self, key):
        filename = secure_filename(key)
        if not filename:
            raise ValueError(f"invalid storage key: {key!r}")
        return os.path.join(self.data_dir, f"{filename}.json")

    def load(self, key):
        return read_json(self.path_for(key))

    def save(self, key, data):
        os.makedirs(self.data_dir, exist_ok=True)
        atomic_write_json(self.path_for(key), data)


class MemoryCartStorage(CartStorage):
    """In-process storage. Values are kept as JSON text so round-trips are real."""

    def __init__(self, initial=None):
        self.values = dict(initial or {})

    def load(self, key):
        raw = self.values.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key, data):
        self.values[key] = json.dumps(data)
