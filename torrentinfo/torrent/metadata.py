from torrentinfo.bencode.value import Value, in_int64, is_value
from torrentinfo.common.config import DEFAULT_DIGEST_SIZE
from torrentinfo.common.errors import EncodeError, MissingFieldError, RangeError
from torrentinfo.torrent.digest import compute_info_hash, split_piece_digests, to_hex


def encode_text(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def decode_text(raw: bytes) -> str:
    # surrogateescape keeps undecodable bytes so encode_text restores them
    return raw.decode("utf-8", "surrogateescape")


def check_length(field: str, value: int) -> None:
    if value < 0:
        raise RangeError(field, value, "negative length")
    if not in_int64(value):
        raise RangeError(field, value, "exceeds 64-bit range")


def check_extra(extra: dict | None) -> dict:
    if not extra:
        return {}
    if not is_value(extra):
        raise EncodeError("extra fields must form a bencode dictionary")
    return dict(extra)


class _ValueObject:
    """Immutable slotted record compared by its public slots."""

    __slots__ = ()

    def _set(self, name, value):
        object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def _fields(self) -> tuple:
        return tuple(
            getattr(self, name) for name in self.__slots__ if not name.startswith("_")
        )

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._fields() == other._fields()

    __hash__ = None

    def __repr__(self):
        fields = ", ".join(
            f"{name}={getattr(self, name)!r}"
            for name in self.__slots__
            if not name.startswith("_")
        )
        return f"{type(self).__name__}({fields})"


class Node(_ValueObject):
    __slots__ = ("host", "port")

    def __init__(self, host: str, port: int):
        self._set("host", host)
        self._set("port", port)

    def to_value(self) -> list:
        return [encode_text(self.host), self.port]


class File(_ValueObject):
    __slots__ = ("length", "path", "md5sum", "extra")

    def __init__(
        self,
        length: int,
        path: list[str] | tuple[str, ...],
        md5sum: str | None = None,
        extra: dict[bytes, Value] | None = None,
    ):
        check_length("length", length)
        self._set("length", length)
        self._set("path", tuple(path))
        self._set("md5sum", md5sum)
        self._set("extra", check_extra(extra))

    def to_value(self) -> dict:
        value = dict(self.extra)
        value[b"length"] = self.length
        value[b"path"] = [encode_text(segment) for segment in self.path]
        if self.md5sum is not None:
            value[b"md5sum"] = encode_text(self.md5sum)
        return value


class Info(_ValueObject):
    """
    The info dictionary. Single-file when files is None, in which case
    length holds the payload size; multi-file otherwise, with name as the
    root directory.

    extra keeps every key this class does not model so the canonical
    re-encoding, and with it the info hash, matches the decoded input.
    """

    __slots__ = (
        "name",
        "piece_length",
        "pieces",
        "length",
        "files",
        "md5sum",
        "private",
        "root_hash",
        "extra",
    )

    def __init__(
        self,
        name: str | None,
        piece_length: int | None,
        pieces: bytes | None,
        length: int | None = None,
        files: list[File] | tuple[File, ...] | None = None,
        md5sum: str | None = None,
        private: int | None = None,
        root_hash: str | None = None,
        extra: dict[bytes, Value] | None = None,
    ):
        if piece_length is not None:
            check_length("piece length", piece_length)
        if length is not None:
            check_length("length", length)
        if private is not None and private not in (0, 1):
            raise RangeError("private", private, "must be 0 or 1")
        self._set("name", name)
        self._set("piece_length", piece_length)
        self._set("pieces", bytes(pieces) if pieces is not None else None)
        self._set("length", length)
        self._set("files", tuple(files) if files is not None else None)
        self._set("md5sum", md5sum)
        self._set("private", private)
        self._set("root_hash", root_hash)
        self._set("extra", check_extra(extra))

    @property
    def is_multi_file(self) -> bool:
        return self.files is not None

    @property
    def is_private(self) -> bool:
        return self.private == 1

    def piece_digests(self, digest_size: int = DEFAULT_DIGEST_SIZE) -> tuple[bytes, ...]:
        return split_piece_digests(self.pieces or b"", digest_size)

    def to_value(self) -> dict:
        """
        Project onto a bencode dictionary. Absent optional fields are left
        out; a missing piece length or piece blob raises MissingFieldError.
        """
        if self.piece_length is None:
            raise MissingFieldError("info.piece length")
        if self.pieces is None:
            raise MissingFieldError("info.pieces")
        value = dict(self.extra)
        if self.files is not None:
            value[b"files"] = [f.to_value() for f in self.files]
        if self.length is not None:
            value[b"length"] = self.length
        if self.md5sum is not None:
            value[b"md5sum"] = encode_text(self.md5sum)
        if self.name is not None:
            value[b"name"] = encode_text(self.name)
        value[b"piece length"] = self.piece_length
        value[b"pieces"] = self.pieces
        if self.private is not None:
            value[b"private"] = self.private
        if self.root_hash is not None:
            value[b"root hash"] = encode_text(self.root_hash)
        return value


class Torrent(_ValueObject):
    __slots__ = (
        "announce",
        "announce_list",
        "comment",
        "created_by",
        "creation_date",
        "encoding",
        "nodes",
        "httpseeds",
        "info",
        "_info_hash",
    )

    def __init__(
        self,
        info: Info,
        announce: str | None = None,
        announce_list: list[list[str]] | None = None,
        comment: str | None = None,
        created_by: str | None = None,
        creation_date: int | None = None,
        encoding: str | None = None,
        nodes: list[Node] | None = None,
        httpseeds: list[str] | None = None,
    ):
        self._set("info", info)
        self._set("announce", announce)
        self._set(
            "announce_list",
            tuple(tuple(tier) for tier in announce_list)
            if announce_list is not None
            else None,
        )
        self._set("comment", comment)
        self._set("created_by", created_by)
        self._set("creation_date", creation_date)
        self._set("encoding", encoding)
        self._set("nodes", tuple(nodes) if nodes is not None else None)
        self._set("httpseeds", tuple(httpseeds) if httpseeds is not None else None)
        self._set("_info_hash", None)

    def info_hash(self) -> bytes:
        """SHA-1 of the canonical info dictionary, computed once."""
        if self._info_hash is None:
            self._set("_info_hash", compute_info_hash(self.info))
        return self._info_hash

    def info_hash_hex(self) -> str:
        return to_hex(self.info_hash())

    def files(self) -> tuple[File, ...] | None:
        return self.info.files

    def num_files(self) -> int:
        files = self.info.files
        return len(files) if files is not None else 1

    def total_size(self) -> int:
        files = self.info.files
        if files is None:
            return self.info.length or 0
        total = sum(f.length for f in files)
        if not in_int64(total):
            raise RangeError("total size", total, "exceeds 64-bit range")
        return total

    @property
    def name(self) -> str | None:
        return self.info.name

    @property
    def piece_length(self) -> int | None:
        return self.info.piece_length

    @property
    def pieces(self) -> bytes | None:
        return self.info.pieces

    def piece_digests(self, digest_size: int = DEFAULT_DIGEST_SIZE) -> tuple[bytes, ...]:
        return self.info.piece_digests(digest_size)

    @property
    def private(self) -> int | None:
        return self.info.private

    @property
    def is_private(self) -> bool:
        return self.info.is_private

    def to_value(self) -> dict:
        value = {b"info": self.info.to_value()}
        if self.announce is not None:
            value[b"announce"] = encode_text(self.announce)
        if self.announce_list is not None:
            value[b"announce-list"] = [
                [encode_text(url) for url in tier] for tier in self.announce_list
            ]
        if self.comment is not None:
            value[b"comment"] = encode_text(self.comment)
        if self.created_by is not None:
            value[b"created by"] = encode_text(self.created_by)
        if self.creation_date is not None:
            value[b"creation date"] = self.creation_date
        if self.encoding is not None:
            value[b"encoding"] = encode_text(self.encoding)
        if self.nodes is not None:
            value[b"nodes"] = [node.to_value() for node in self.nodes]
        if self.httpseeds is not None:
            value[b"httpseeds"] = [encode_text(url) for url in self.httpseeds]
        return value
