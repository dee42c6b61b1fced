import pytest

from torrentinfo.bencode.decoder import MAX_DEPTH, Decoder, decode
from torrentinfo.common.errors import DecodeError, RangeError, StructuralError
from torrentinfo.torrent.parser import parse_torrent


def test_decode_string():
    assert Decoder(b"4:spam").decode() == b"spam"


def test_decode_empty_string():
    assert decode(b"0:") == b""


def test_decode_integer():
    assert decode(b"i42e") == 42
    assert decode(b"i-42e") == -42
    assert decode(b"i0e") == 0


def test_decode_int64_bounds():
    assert decode(b"i9223372036854775807e") == 2**63 - 1
    assert decode(b"i-9223372036854775808e") == -(2**63)


def test_decode_integer_out_of_range():
    with pytest.raises(RangeError):
        decode(b"i9223372036854775808e")


def test_decode_list():
    assert decode(b"l4:spami42ee") == [b"spam", 42]
    assert decode(b"le") == []


def test_decode_dictionary():
    assert decode(b"d3:bar4:spam3:fooi42ee") == {b"bar": b"spam", b"foo": 42}
    assert decode(b"de") == {}


def test_decode_keeps_input_key_order():
    decoded = decode(b"d3:fooi1e3:bari2ee")
    assert list(decoded) == [b"foo", b"bar"]


def test_decode_binary_keys_and_values():
    decoded = decode(b"d2:\xff\x00l1:\x80ee")
    assert decoded == {b"\xff\x00": [b"\x80"]}


def test_decode_nested():
    decoded = decode(
        b"d4:infod6:lengthi123456e4:name8:test.txte"
        b"12:piece lengthi32768e6:pieces20:aaaaaaaaaaaaaaaaaaaae"
    )
    assert decoded[b"info"][b"length"] == 123456
    assert decoded[b"pieces"] == b"a" * 20


def test_decode_accepts_bytearray_and_memoryview():
    assert decode(bytearray(b"i7e")) == 7
    assert decode(memoryview(b"3:abc")) == b"abc"


def test_decode_invalid_type():
    with pytest.raises(TypeError):
        Decoder("i42e")


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"i42",
        b"ie",
        b"i-e",
        b"i-0e",
        b"i03e",
        b"i4x2e",
        b"i 1e",
        b"4-spam",
        b"4:spa",
        b"03:abc",
        b"10:short",
        b"l4:spam",
        b"d3:foo",
        b"d8:announce",
        b"di1ei2ee",
        b"d3:fooi1e3:fooi2ee",
        b"x",
        b"i1ei2e",
        b"4:spamextra",
        b"le ",
    ],
)
def test_decode_malformed(data):
    with pytest.raises(StructuralError):
        decode(data)


def test_structural_error_is_a_decode_error_with_position():
    with pytest.raises(DecodeError) as excinfo:
        decode(b"l4:spamx")
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.position == 7


def test_trailing_garbage_position():
    with pytest.raises(StructuralError) as excinfo:
        decode(b"i1eXX")
    assert excinfo.value.position == 3


def test_decode_depth_limit():
    nested = b"l" * (MAX_DEPTH + 1) + b"e" * (MAX_DEPTH + 1)
    with pytest.raises(StructuralError):
        decode(nested)
    ok = b"l" * MAX_DEPTH + b"e" * MAX_DEPTH
    assert decode(ok) is not None


@pytest.mark.parametrize("digits", [20, 5000])
def test_decode_overlong_integer(digits):
    with pytest.raises(RangeError) as excinfo:
        decode(b"i" + b"1" * digits + b"e")
    assert excinfo.value.value is None


def test_decode_overlong_negative_integer():
    with pytest.raises(RangeError):
        decode(b"i-" + b"9" * 5000 + b"e")


@pytest.mark.parametrize("digits", [20, 5000])
def test_decode_overlong_string_length(digits):
    with pytest.raises(StructuralError):
        decode(b"d4:info" + b"1" * digits + b":xe")


def test_overlong_digits_surface_as_decode_errors():
    for data in (b"i" + b"1" * 5000 + b"e", b"d4:info" + b"1" * 5000 + b":xe"):
        with pytest.raises(DecodeError):
            parse_torrent(data)
