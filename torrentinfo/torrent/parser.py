import logging

from torrentinfo.bencode.decoder import decode
from torrentinfo.bencode.value import KIND_BYTES, KIND_DICT, KIND_INTEGER, KIND_LIST, Value, value_kind
from torrentinfo.common.config import ParseOptions
from torrentinfo.common.errors import MissingFieldError, RangeError, TypeMismatchError
from torrentinfo.torrent.digest import split_piece_digests
from torrentinfo.torrent.metadata import File, Info, Node, Torrent, check_length, decode_text

logger = logging.getLogger(__name__)

_PYTHON_TYPES = {
    KIND_INTEGER: int,
    KIND_BYTES: bytes,
    KIND_LIST: list,
    KIND_DICT: dict,
}

INFO_KEYS = frozenset(
    {
        b"files",
        b"length",
        b"md5sum",
        b"name",
        b"piece length",
        b"pieces",
        b"private",
        b"root hash",
    }
)
FILE_KEYS = frozenset({b"length", b"path", b"md5sum"})


def _check_kind(value, kind: str, field: str):
    if not isinstance(value, _PYTHON_TYPES[kind]):
        raise TypeMismatchError(field, kind, value_kind(value))
    return value


def _get(container: dict, key: bytes, kind: str, field: str):
    """Typed lookup; None when the key is absent."""
    value = container.get(key)
    if value is None:
        return None
    return _check_kind(value, kind, field)


def _get_text(container: dict, key: bytes, field: str) -> str | None:
    raw = _get(container, key, KIND_BYTES, field)
    return decode_text(raw) if raw is not None else None


def _text_list(items: list, field: str) -> list[str]:
    return [
        decode_text(_check_kind(item, KIND_BYTES, f"{field}[{i}]"))
        for i, item in enumerate(items)
    ]


def parse_torrent(data: bytes, options: ParseOptions | None = None) -> Torrent:
    """
    Decode a complete .torrent buffer into a Torrent.

    Raises:
        DecodeError: a StructuralError, TypeMismatchError, MissingFieldError,
            RangeError or (strict mode) PieceAlignmentError. Nothing partial
            is returned.
    """
    logger.debug(f"Parsing {len(data)} bytes of torrent metadata")
    return torrent_from_value(decode(data), options)


def torrent_from_value(metainfo: Value, options: ParseOptions | None = None) -> Torrent:
    options = options or ParseOptions()
    _check_kind(metainfo, KIND_DICT, "metainfo")

    raw_info = metainfo.get(b"info")
    if raw_info is None:
        raise MissingFieldError("info")
    info = info_from_value(raw_info, options)

    torrent = Torrent(
        info=info,
        announce=_get_text(metainfo, b"announce", "announce"),
        announce_list=_announce_list(metainfo),
        comment=_get_text(metainfo, b"comment", "comment"),
        created_by=_get_text(metainfo, b"created by", "created by"),
        creation_date=_get(metainfo, b"creation date", KIND_INTEGER, "creation date"),
        encoding=_get_text(metainfo, b"encoding", "encoding"),
        nodes=_nodes(metainfo),
        httpseeds=_httpseeds(metainfo),
    )

    context = {
        "torrent_name": info.name,
        "num_files": torrent.num_files(),
        "total_size": torrent.total_size(),
    }
    if info.is_multi_file:
        logger.info(
            f"Parsed multi-file torrent: {info.name} "
            f"({context['num_files']} files, {context['total_size']} bytes)",
            extra=context,
        )
    else:
        logger.info(
            f"Parsed single-file torrent: {info.name} ({context['total_size']} bytes)",
            extra=context,
        )
    return torrent


def _announce_list(metainfo: dict) -> list[list[str]] | None:
    raw = _get(metainfo, b"announce-list", KIND_LIST, "announce-list")
    if raw is None:
        return None
    tiers = []
    for i, tier in enumerate(raw):
        field = f"announce-list[{i}]"
        # some writers emit a flat list of URLs instead of tiers
        if isinstance(tier, bytes):
            tiers.append([decode_text(tier)])
        elif isinstance(tier, list):
            tiers.append(_text_list(tier, field))
        else:
            raise TypeMismatchError(field, f"{KIND_LIST} or {KIND_BYTES}", value_kind(tier))
    return tiers


def _nodes(metainfo: dict) -> list[Node] | None:
    raw = _get(metainfo, b"nodes", KIND_LIST, "nodes")
    if raw is None:
        return None
    return [node_from_value(item, f"nodes[{i}]") for i, item in enumerate(raw)]


def _httpseeds(metainfo: dict) -> list[str] | None:
    raw = _get(metainfo, b"httpseeds", KIND_LIST, "httpseeds")
    if raw is None:
        return None
    return _text_list(raw, "httpseeds")


def node_from_value(value: Value, field: str = "node") -> Node:
    _check_kind(value, KIND_LIST, field)
    if len(value) != 2:
        raise TypeMismatchError(field, "[host, port] pair", f"{len(value)} items")
    host = _check_kind(value[0], KIND_BYTES, f"{field}[0]")
    port = _check_kind(value[1], KIND_INTEGER, f"{field}[1]")
    return Node(decode_text(host), port)


def file_from_value(value: Value, field: str = "file") -> File:
    _check_kind(value, KIND_DICT, field)

    length = _get(value, b"length", KIND_INTEGER, f"{field}.length")
    if length is None:
        raise MissingFieldError(f"{field}.length")
    check_length(f"{field}.length", length)

    raw_path = _get(value, b"path", KIND_LIST, f"{field}.path")
    if raw_path is None:
        raise MissingFieldError(f"{field}.path")

    return File(
        length=length,
        path=_text_list(raw_path, f"{field}.path"),
        md5sum=_get_text(value, b"md5sum", f"{field}.md5sum"),
        extra={k: v for k, v in value.items() if k not in FILE_KEYS},
    )


def info_from_value(value: Value, options: ParseOptions | None = None) -> Info:
    """
    Map the info dictionary. Lenient mode substitutes 0 for a missing piece
    length and b"" for missing pieces; strict mode raises MissingFieldError.
    """
    options = options or ParseOptions()
    _check_kind(value, KIND_DICT, "info")

    piece_length = _get(value, b"piece length", KIND_INTEGER, "info.piece length")
    if piece_length is None:
        if options.strict:
            raise MissingFieldError("info.piece length")
        logger.warning("Info has no piece length, using 0", extra={"field": "info.piece length"})
        piece_length = 0
    check_length("info.piece length", piece_length)
    if options.strict and piece_length == 0:
        raise RangeError("info.piece length", piece_length, "must be positive")

    pieces = _get(value, b"pieces", KIND_BYTES, "info.pieces")
    if pieces is None:
        if options.strict:
            raise MissingFieldError("info.pieces")
        logger.warning("Info has no pieces, using an empty blob", extra={"field": "info.pieces"})
        pieces = b""
    if options.strict:
        split_piece_digests(pieces, options.digest_size)

    name = _get_text(value, b"name", "info.name")
    if name is None:
        if options.strict:
            raise MissingFieldError("info.name")
        logger.warning("Info has no name", extra={"field": "info.name"})

    length = _get(value, b"length", KIND_INTEGER, "info.length")
    if length is not None:
        check_length("info.length", length)

    files = None
    raw_files = _get(value, b"files", KIND_LIST, "info.files")
    if raw_files is not None:
        files = [
            file_from_value(item, f"info.files[{i}]") for i, item in enumerate(raw_files)
        ]
        if length is not None:
            logger.warning(
                "Info has both length and files, treating it as multi-file",
                extra={"field": "info.length"},
            )
    elif length is None:
        if options.strict:
            raise MissingFieldError("info.length")
        logger.warning(
            "Info has neither length nor files, assuming an empty single file",
            extra={"field": "info.length"},
        )

    private = _get(value, b"private", KIND_INTEGER, "info.private")
    if private is not None and private not in (0, 1):
        raise RangeError("info.private", private, "must be 0 or 1")

    return Info(
        name=name,
        piece_length=piece_length,
        pieces=pieces,
        length=length,
        files=files,
        md5sum=_get_text(value, b"md5sum", "info.md5sum"),
        private=private,
        root_hash=_get_text(value, b"root hash", "info.root hash"),
        extra={k: v for k, v in value.items() if k not in INFO_KEYS},
    )
