DEFAULT_DIGEST_SIZE = 20  # SHA-1


class ParseOptions:
    """
    Knobs for the metadata mapper.

    strict: reject an info dictionary missing piece length, pieces, name,
        or both of length/files instead of substituting defaults, and check
        piece-blob alignment while parsing.
    digest_size: bytes per piece digest, used for the alignment check.
    """

    __slots__ = ("strict", "digest_size")

    def __init__(self, strict: bool = False, digest_size: int = DEFAULT_DIGEST_SIZE):
        if isinstance(digest_size, bool) or not isinstance(digest_size, int):
            raise ValueError(f"digest_size must be an int: {digest_size!r}")
        if digest_size <= 0:
            raise ValueError(f"digest_size must be positive: {digest_size}")
        self.strict = bool(strict)
        self.digest_size = digest_size

    @classmethod
    def lenient(cls) -> "ParseOptions":
        return cls(strict=False)

    @classmethod
    def strict_mode(cls) -> "ParseOptions":
        return cls(strict=True)

    def __repr__(self):
        return f"ParseOptions(strict={self.strict}, digest_size={self.digest_size})"
