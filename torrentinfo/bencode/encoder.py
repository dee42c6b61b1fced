from torrentinfo.bencode.value import in_int64
from torrentinfo.common.errors import EncodeError


class Encoder:
    """
    Encodes a Python object into canonical bencode.

    Dictionary keys are written in ascending raw-byte order whatever the
    insertion order of the mapping; the info hash depends on it.
    """

    __slots__ = ("_data",)

    def __init__(self, data):
        self._data = data

    def encode(self) -> bytes:
        """
        Returns:
            The bencoded data.

        Raises:
            EncodeError: the object (or something inside it) has no bencode form.
        """
        chunks: list[bytes] = []
        self._encode_obj(self._data, chunks)
        return b"".join(chunks)

    def _encode_obj(self, data, chunks: list[bytes]) -> None:
        to_value = getattr(data, "to_value", None)
        if callable(to_value):
            data = to_value()
        # bool is an int subclass but has no bencode meaning
        if isinstance(data, bool):
            raise EncodeError(f"Cannot bencode bool: {data!r}")
        if isinstance(data, int):
            self._encode_int(data, chunks)
        elif isinstance(data, (bytes, bytearray, memoryview, str)):
            self._encode_bytes(_to_bytes(data), chunks)
        elif isinstance(data, (list, tuple)):
            chunks.append(b"l")
            for item in data:
                self._encode_obj(item, chunks)
            chunks.append(b"e")
        elif isinstance(data, dict):
            self._encode_dict(data, chunks)
        else:
            raise EncodeError(f"Cannot bencode object of type {type(data).__name__}")

    @staticmethod
    def _encode_int(value: int, chunks: list[bytes]) -> None:
        if not in_int64(value):
            raise EncodeError(f"Integer {value} exceeds 64-bit range")
        chunks.append(b"i%de" % value)

    @staticmethod
    def _encode_bytes(value: bytes, chunks: list[bytes]) -> None:
        chunks.append(b"%d:" % len(value))
        chunks.append(value)

    def _encode_dict(self, data: dict, chunks: list[bytes]) -> None:
        items = {}
        for key, value in data.items():
            if not isinstance(key, (bytes, bytearray, memoryview, str)):
                raise EncodeError(
                    f"Dictionary keys must be bytes or str, not {type(key).__name__}"
                )
            raw_key = _to_bytes(key)
            if raw_key in items:
                raise EncodeError(f"Duplicate dictionary key {raw_key!r}")
            items[raw_key] = value
        chunks.append(b"d")
        for raw_key in sorted(items):
            self._encode_bytes(raw_key, chunks)
            self._encode_obj(items[raw_key], chunks)
        chunks.append(b"e")


def _to_bytes(data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8", "surrogateescape")
    return bytes(data)


def encode(data) -> bytes:
    return Encoder(data).encode()
