import pytest

SINGLE_FILE_INFO = (
    b"d6:lengthi100e4:name8:test.txt12:piece lengthi16384e"
    b"6:pieces20:AAAAAAAAAAAAAAAAAAAAe"
)
SINGLE_FILE_TORRENT = b"d8:announce22:http://example.com/ann4:info" + SINGLE_FILE_INFO + b"e"
SINGLE_FILE_INFO_HASH = "e0f88e7421116c1359e9063ebcc8ac80da0fdac3"

MULTI_FILE_INFO = (
    b"d5:filesl"
    b"d6:lengthi10e4:pathl1:aee"
    b"d6:lengthi20e4:pathl3:sub1:bee"
    b"d6:lengthi30e4:pathl1:cee"
    b"e4:name4:root12:piece lengthi16384e"
    b"6:pieces40:" + b"B" * 20 + b"C" * 20 + b"e"
)
MULTI_FILE_INFO_HASH = "f0fbc13d871d2c8d15caa6524ec6ba92d750e9fb"


@pytest.fixture
def single_file_torrent() -> bytes:
    return SINGLE_FILE_TORRENT


@pytest.fixture
def multi_file_torrent() -> bytes:
    return (
        b"d8:announce22:http://example.com/ann"
        b"13:announce-listll22:http://example.com/annel19:udp://backup.org:80ee"
        b"7:comment5:hello"
        b"10:created by9:mktorrent"
        b"13:creation datei1500000000e"
        b"8:encoding5:UTF-8"
        b"9:httpseedsl20:http://seed.example/e"
        b"4:info" + MULTI_FILE_INFO +
        b"5:nodesll9:127.0.0.1i6881eee"
        b"e"
    )
