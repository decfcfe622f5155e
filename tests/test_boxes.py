import struct

import pytest

from vsdkit.errors import ReadError
from vsdkit.reader import Reader
from vsdkit.text.boxes import parse_mdhd, parse_tfdt, parse_tfhd, parse_trun


def _lang(code):
    a, b, c = (ord(ch) - 0x60 for ch in code)
    return (a << 10) | (b << 5) | c


def test_tfhd_track_id_only():
    box = parse_tfhd(Reader(struct.pack(">I", 7)), 0)
    assert box.track_id == 7
    assert box.default_sample_duration is None
    assert box.default_sample_size is None
    assert box.base_data_offset is None


def test_tfhd_all_optional_fields():
    data = struct.pack(">IQIII", 3, 1234, 99, 500, 64)
    reader = Reader(data)
    box = parse_tfhd(reader, 0x01 | 0x02 | 0x08 | 0x10)
    assert box.track_id == 3
    assert box.base_data_offset == 1234
    assert box.default_sample_duration == 500
    assert box.default_sample_size == 64
    assert not reader.has_more_data()


def test_tfhd_truncated_raises_read_error():
    with pytest.raises(ReadError) as info:
        parse_tfhd(Reader(struct.pack(">I", 1)), 0x08)
    assert str(info.value).startswith("Cannot read TFHD box default sample duration")


def test_tfdt_versions():
    assert parse_tfdt(Reader(struct.pack(">I", 90000)), 0).base_media_decode_time == 90000
    big = (1 << 40) + 5
    assert parse_tfdt(Reader(struct.pack(">Q", big)), 1).base_media_decode_time == big


def test_tfdt_empty_raises():
    with pytest.raises(ReadError):
        parse_tfdt(Reader(b""), 0)


@pytest.mark.parametrize("version,time_size", [(0, 4), (1, 8)])
def test_mdhd_timescale_and_language(version, time_size):
    data = (
        bytes(time_size * 2)
        + struct.pack(">I", 1000)
        + bytes(4)
        + struct.pack(">H", _lang("eng"))
    )
    box = parse_mdhd(Reader(data), version)
    assert box.timescale == 1000
    assert box.language == "eng"


def test_mdhd_truncated():
    with pytest.raises(ReadError):
        parse_mdhd(Reader(bytes(8)), 0)


def test_trun_all_fields_version_0_wraps_offset():
    flags = 0x001 | 0x004 | 0x100 | 0x200 | 0x400 | 0x800
    data = struct.pack(">III", 2, 40, 0)
    data += struct.pack(">IIII", 10, 20, 0, 0xFFFFFFFF)
    data += struct.pack(">IIII", 11, 21, 0, 5)
    box = parse_trun(Reader(data), 0, flags)
    assert box.sample_count == 2
    assert box.data_offset == 40
    assert [s.sample_duration for s in box.sample_data] == [10, 11]
    assert [s.sample_size for s in box.sample_data] == [20, 21]
    assert [s.sample_composition_time_offset for s in box.sample_data] == [-1, 5]


def test_trun_version_1_signed_offset():
    data = struct.pack(">I", 1) + struct.pack(">i", -5)
    box = parse_trun(Reader(data), 1, 0x800)
    assert box.sample_data[0].sample_composition_time_offset == -5
    assert box.sample_data[0].sample_duration is None
    assert box.data_offset is None


def test_trun_missing_sample_raises():
    data = struct.pack(">II", 2, 10)
    with pytest.raises(ReadError):
        parse_trun(Reader(data), 0, 0x100)