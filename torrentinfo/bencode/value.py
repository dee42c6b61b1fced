from typing import Union

# A bencode value as Python sees it: int, bytes, list or dict with bytes keys.
Value = Union[int, bytes, list["Value"], dict[bytes, "Value"]]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

KIND_INTEGER = "integer"
KIND_BYTES = "byte-string"
KIND_LIST = "list"
KIND_DICT = "dictionary"


def value_kind(value) -> str:
    """Name of the bencode variant a Python object maps to, for messages."""
    if isinstance(value, bool):
        return type(value).__name__
    if isinstance(value, int):
        return KIND_INTEGER
    if isinstance(value, (bytes, bytearray, memoryview)):
        return KIND_BYTES
    if isinstance(value, list):
        return KIND_LIST
    if isinstance(value, dict):
        return KIND_DICT
    return type(value).__name__


def in_int64(n: int) -> bool:
    return INT64_MIN <= n <= INT64_MAX


def is_value(value) -> bool:
    """True when value is a well-formed Value tree."""
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, bool):
            return False
        if isinstance(item, int):
            if not in_int64(item):
                return False
        elif isinstance(item, bytes):
            continue
        elif isinstance(item, list):
            stack.extend(item)
        elif isinstance(item, dict):
            if not all(isinstance(k, bytes) for k in item):
                return False
            stack.extend(item.values())
        else:
            return False
    return True
