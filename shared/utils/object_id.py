"""
Identifier generation for stored records.

Identifiers are 24 hexadecimal characters: a 4-byte big-endian timestamp in
seconds, 5 bytes unique to the process and a 3-byte counter. Sorting them as
strings orders records by creation time.
"""

import itertools
import os
import random
import re
import struct
import time

_OBJECT_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")

_process_unique = os.urandom(5)
_counter = itertools.count(random.randint(0, 0xFFFFFF))


def new_object_id() -> str:
    """Generate a new identifier."""
    timestamp = struct.pack(">I", int(time.time()) & 0xFFFFFFFF)
    count = struct.pack(">I", next(_counter) & 0xFFFFFF)[1:]
    return (timestamp + _process_unique + count).hex()


def is_object_id(value) -> bool:
    """Check whether a value has the shape of an identifier."""
    return isinstance(value, str) and bool(_OBJECT_ID_PATTERN.match(value))
