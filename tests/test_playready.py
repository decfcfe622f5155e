import base64
import struct

import pytest

from vsdkit.errors import DecodeError, Mp4Error, ReadError
from vsdkit.pssh.playready import WrmHeader, parse, parse_wrm_header

KID_A = bytes(range(16))
KID_B = bytes(range(16, 32))
KID_C = bytes(range(100, 116))


def b64(raw):
    return base64.b64encode(raw).decode()


def playready_object(records):
    body = struct.pack("<H", len(records)) + b"".join(
        struct.pack("<HH", kind, len(data)) + data for kind, data in records
    )
    return struct.pack("<I", 4 + len(body)) + body


def wrm(xml):
    return (1, xml.encode("utf-16-le"))


def test_version_40_uses_data_kid():
    xml = (
        '<WRMHEADER xmlns="urn:example:playready" version="4.0.0.0">'
        f"<DATA><KID>{b64(KID_A)}</KID></DATA></WRMHEADER>"
    )
    assert parse(playready_object([wrm(xml)])) == [KID_A.hex()]


def test_version_41_uses_protect_info_kid():
    xml = (
        '<WRMHEADER version="4.1.0.0"><DATA><PROTECTINFO>'
        f'<KID VALUE="{b64(KID_B)}" ALGID="AESCTR"/>'
        "</PROTECTINFO></DATA></WRMHEADER>"
    )
    assert parse(playready_object([wrm(xml)])) == [KID_B.hex()]


def test_version_42_collects_kid_and_kids():
    xml = (
        '<WRMHEADER version="4.2.0.0"><DATA><PROTECTINFO>'
        f'<KID VALUE="{b64(KID_A)}"/>'
        f'<KIDS><KID VALUE="{b64(KID_B)}"/><KID VALUE="{b64(KID_C)}"/></KIDS>'
        "</PROTECTINFO></DATA></WRMHEADER>"
    )
    assert parse(playready_object([wrm(xml)])) == [KID_A.hex(), KID_B.hex(), KID_C.hex()]


def test_header_without_data_has_no_kids():
    header = parse_wrm_header('<WRMHEADER version="4.3.0.0"/>')
    assert header.kids() == []


def test_unsupported_version_raises():
    header = WrmHeader(version="5.0.0.0", data_kid=b64(KID_A))
    with pytest.raises(Mp4Error) as info:
        header.kids()
    assert "v5.0.0.0" in str(info.value)


def test_invalid_base64_kid_raises():
    header = WrmHeader(version="4.0.0.0", data_kid="not base64!")
    with pytest.raises(DecodeError):
        header.kids()


def test_wrong_object_length_raises():
    data = playready_object([]) + b"\x00\x00"
    with pytest.raises(Mp4Error) as info:
        parse(data)
    assert str(info.value) == "Invalid length of PSSH box playready object."


def test_other_record_types_are_ignored():
    data = playready_object([(2, b"\x01\x00"), (3, b"")])
    assert parse(data) == []


def test_unknown_record_type_raises():
    with pytest.raises(Mp4Error) as info:
        parse(playready_object([(7, b"")]))
    assert "record type 7" in str(info.value)


def test_extra_data_after_records_raises():
    body = struct.pack("<H", 0) + b"\xff\xff"
    data = struct.pack("<I", 4 + len(body)) + body
    with pytest.raises(ReadError):
        parse(data)


def test_truncated_record_raises():
    body = struct.pack("<HHH", 1, 1, 40)
    data = struct.pack("<I", 4 + len(body)) + body
    with pytest.raises(ReadError):
        parse(data)


def test_malformed_xml_raises():
    with pytest.raises(DecodeError):
        parse(playready_object([wrm("<WRMHEADER version='4.0.0.0'>")]))


def test_missing_version_raises():
    with pytest.raises(DecodeError):
        parse_wrm_header("<WRMHEADER><DATA/></WRMHEADER>")