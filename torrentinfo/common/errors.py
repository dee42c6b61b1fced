class TorrentError(Exception):
    """Base class for everything raised by torrentinfo."""


class DecodeError(TorrentError, ValueError):
    """Bencode input or torrent metadata could not be decoded."""


class StructuralError(DecodeError):
    # bencode grammar violation at a byte offset
    def __init__(self, message: str, position: int | None = None):
        if position is not None:
            message = f"{message} (at byte {position})"
        super().__init__(message)
        self.position = position


class TypeMismatchError(DecodeError):
    def __init__(self, field: str, expected: str, actual: str):
        super().__init__(f"{field}: expected {expected}, got {actual}")
        self.field = field
        self.expected = expected
        self.actual = actual


class MissingFieldError(DecodeError):
    def __init__(self, field: str):
        super().__init__(f"missing mandatory field: {field}")
        self.field = field


class PieceAlignmentError(DecodeError):
    def __init__(self, length: int, digest_size: int):
        super().__init__(
            f"piece blob of {length} bytes is not a multiple of {digest_size}"
        )
        self.length = length
        self.digest_size = digest_size


class RangeError(DecodeError):
    # value is None when it is too large to materialise
    def __init__(self, field: str, value: int | None, message: str = "out of range"):
        if value is not None:
            message = f"{message} ({value})"
        super().__init__(f"{field}: {message}")
        self.field = field
        self.value = value


class EncodeError(TorrentError, TypeError):
    """A Python object has no bencode representation."""
