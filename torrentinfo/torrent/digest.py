import hashlib
import logging

from torrentinfo.bencode.encoder import encode
from torrentinfo.common.config import DEFAULT_DIGEST_SIZE
from torrentinfo.common.errors import PieceAlignmentError

logger = logging.getLogger(__name__)

INFO_HASH_SIZE = 20


def split_piece_digests(
    blob: bytes, digest_size: int = DEFAULT_DIGEST_SIZE
) -> tuple[bytes, ...]:
    """
    Cut the concatenated piece hashes into digest_size chunks, in order.
    A trailing partial digest is an error, never dropped.
    """
    if len(blob) % digest_size != 0:
        raise PieceAlignmentError(len(blob), digest_size)
    return tuple(
        bytes(blob[i : i + digest_size]) for i in range(0, len(blob), digest_size)
    )


def compute_info_hash(info) -> bytes:
    """SHA-1 of the canonical bencoding of an Info (or raw info dictionary)."""
    encoded = encode(info)
    info_hash = hashlib.sha1(encoded).digest()
    logger.debug(
        f"Info hash {info_hash.hex()} over {len(encoded)} bytes",
        extra={"info_hash": info_hash.hex()},
    )
    return info_hash


def to_hex(data: bytes) -> str:
    return bytes(data).hex()
