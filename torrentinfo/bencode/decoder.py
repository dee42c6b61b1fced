import logging

from torrentinfo.bencode.value import Value, in_int64
from torrentinfo.common.errors import RangeError, StructuralError

logger = logging.getLogger(__name__)

TOKEN_INTEGER = b"i"
TOKEN_LIST = b"l"
TOKEN_DICT = b"d"
TOKEN_END = b"e"
TOKEN_STRING_SEPARATOR = b":"
TOKEN_NEGATIVE = b"-"

DIGITS = b"0123456789"

# len(str(2**63)); longer digit runs cannot fit in 64 bits
MAX_DIGITS = 19

# Nesting limit; keeps hostile input from exhausting the interpreter stack.
MAX_DEPTH = 256


class Decoder:
    """
    Decodes a bencoded byte string in a single forward scan.

    Dictionaries keep the key order of the input. Any grammar violation,
    including bytes left over after the top-level value, raises
    StructuralError with the offending offset.
    """

    __slots__ = ("_data", "_index", "_depth")

    def __init__(self, data: bytes):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"The data to decode must be bytes, not {type(data).__name__}."
            )
        self._data = bytes(data)
        self._index = 0
        self._depth = 0

    def decode(self) -> Value:
        """
        Decodes the whole buffer.

        Returns:
            The decoded value (int, bytes, list or dict).

        Raises:
            StructuralError: the data is not valid bencode.
            RangeError: an integer does not fit in 64 signed bits.
        """
        if not self._data:
            raise StructuralError("empty input", 0)
        value = self._decode_value()
        if self._index != len(self._data):
            raise StructuralError(
                f"{len(self._data) - self._index} trailing bytes after value",
                self._index,
            )
        return value

    def _peek(self) -> bytes:
        return self._data[self._index : self._index + 1]

    def _decode_value(self) -> Value:
        token = self._peek()
        if not token:
            raise StructuralError("unexpected end of input", self._index)
        if token == TOKEN_INTEGER:
            return self._decode_int()
        if token in (TOKEN_LIST, TOKEN_DICT):
            self._depth += 1
            if self._depth > MAX_DEPTH:
                raise StructuralError(
                    f"nesting deeper than {MAX_DEPTH} levels", self._index
                )
            try:
                if token == TOKEN_LIST:
                    return self._decode_list()
                return self._decode_dict()
            finally:
                self._depth -= 1
        if token[0] in DIGITS:
            return self._decode_str()
        raise StructuralError(f"unexpected token {token!r}", self._index)

    def _read_digits(self) -> bytes:
        start = self._index
        end = start
        data = self._data
        while end < len(data) and data[end] in DIGITS:
            end += 1
        self._index = end
        return data[start:end]

    def _expect(self, token: bytes, what: str) -> None:
        found = self._peek()
        if found != token:
            if not found:
                raise StructuralError(f"unterminated {what}", self._index)
            raise StructuralError(
                f"expected {token!r} in {what}, found {found!r}", self._index
            )
        self._index += 1

    def _decode_int(self) -> int:
        start = self._index
        self._index += 1  # 'i'
        negative = self._peek() == TOKEN_NEGATIVE
        if negative:
            self._index += 1
        digits_at = self._index
        digits = self._read_digits()
        if not digits:
            if self._index >= len(self._data):
                raise StructuralError("unterminated integer", self._index)
            raise StructuralError(
                f"expected digit in integer, found {self._peek()!r}", self._index
            )
        if digits[0:1] == b"0" and (len(digits) > 1 or negative):
            raise StructuralError("integer with leading zero or negative zero", digits_at)
        self._expect(TOKEN_END, "integer")
        if len(digits) > MAX_DIGITS:
            raise RangeError(
                f"integer at byte {start}", None, f"{len(digits)} digits exceed 64-bit range"
            )
        value = int(digits)
        if negative:
            value = -value
        if not in_int64(value):
            raise RangeError(f"integer at byte {start}", value, "exceeds 64-bit range")
        return value

    def _decode_str(self) -> bytes:
        digits_at = self._index
        digits = self._read_digits()
        if len(digits) > 1 and digits[0:1] == b"0":
            raise StructuralError("string length with leading zero", digits_at)
        self._expect(TOKEN_STRING_SEPARATOR, "string length")
        if len(digits) > MAX_DIGITS:
            raise StructuralError(
                f"string length of {len(digits)} digits exceeds the input", digits_at
            )
        length = int(digits)
        end = self._index + length
        if end > len(self._data):
            raise StructuralError(
                f"string length {length} exceeds the {len(self._data) - self._index} "
                "remaining bytes",
                digits_at,
            )
        value = self._data[self._index : end]
        self._index = end
        return value

    def _decode_list(self) -> list:
        self._index += 1  # 'l'
        items = []
        while self._peek() != TOKEN_END:
            if not self._peek():
                raise StructuralError("unterminated list", self._index)
            items.append(self._decode_value())
        self._index += 1
        return items

    def _decode_dict(self) -> dict:
        self._index += 1  # 'd'
        result = {}
        while self._peek() != TOKEN_END:
            token = self._peek()
            if not token:
                raise StructuralError("unterminated dictionary", self._index)
            if token[0] not in DIGITS:
                raise StructuralError(
                    f"dictionary key must be a byte-string, found {token!r}",
                    self._index,
                )
            key_at = self._index
            key = self._decode_str()
            if key in result:
                raise StructuralError(f"duplicate dictionary key {key!r}", key_at)
            result[key] = self._decode_value()
        self._index += 1
        return result


def decode(data: bytes) -> Value:
    value = Decoder(data).decode()
    logger.debug(f"Decoded {len(data)} bytes of bencode")
    return value
