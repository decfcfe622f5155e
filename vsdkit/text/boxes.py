"""Parsers for the fragment and media header boxes used by subtitle tracks."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import ReadError


def _read(func, what, *args):
    try:
        return func(*args)
    except EOFError as err:
        raise ReadError(what) from err


@dataclass
class TfhdBox:
    """Track fragment header."""

    track_id: int
    default_sample_duration: Optional[int] = None
    default_sample_size: Optional[int] = None
    base_data_offset: Optional[int] = None


@dataclass
class TfdtBox:
    """Track fragment decode time."""

    base_media_decode_time: int


@dataclass
class MdhdBox:
    """Media header: the timescale and ISO-639-2/T language code."""

    timescale: int
    language: str


@dataclass
class TrunSample:
    """Per-sample values from a track run; absent fields are None."""

    sample_duration: Optional[int] = None
    sample_size: Optional[int] = None
    sample_composition_time_offset: Optional[int] = None


@dataclass
class TrunBox:
    """Track run: the samples added by one run."""

    sample_count: int
    sample_data: List[TrunSample] = field(default_factory=list)
    data_offset: Optional[int] = None


def parse_tfhd(reader, flags):
    """Parse a TFHD payload whose optional fields are selected by ``flags``."""
    track_id = _read(reader.read_u32, "TFHD box track id (u32)")
    box = TfhdBox(track_id=track_id)

    if flags & 0x000001:
        box.base_data_offset = _read(reader.read_u64, "TFHD box data offset (u64)")
    if flags & 0x000002:
        _read(reader.skip, "TFHD box sample description index data (4 bytes)", 4)
    if flags & 0x000008:
        box.default_sample_duration = _read(
            reader.read_u32, "TFHD box default sample duration (u32)"
        )
    if flags & 0x000010:
        box.default_sample_size = _read(
            reader.read_u32, "TFHD box default sample size (u32)"
        )
    return box


def parse_tfdt(reader, version):
    """Parse a TFDT payload; version 1 stores a 64-bit decode time."""
    if version == 1:
        value = _read(reader.read_u64, "TFDT box base media decode time (u64)")
    else:
        value = _read(reader.read_u32, "TFDT box base media decode time (u32)")
    return TfdtBox(base_media_decode_time=value)


def parse_mdhd(reader, version):
    """Parse an MDHD payload for its timescale and language."""
    if version == 1:
        _read(reader.skip, "MDHD box creation time data (8 bytes)", 8)
        _read(reader.skip, "MDHD box modification time data (8 bytes)", 8)
    else:
        _read(reader.skip, "MDHD box creation time data (4 bytes)", 4)
        _read(reader.skip, "MDHD box modification time data (4 bytes)", 4)

    timescale = _read(reader.read_u32, "MDHD box timescale (u32)")
    _read(reader.skip, "MDHD box duration data (4 bytes)", 4)
    language = _read(reader.read_u16, "MDHD box language data (u16)")

    # Three packed 5-bit fields, each the offset of a letter from 0x60.
    letters = (
        (language >> 10) + 0x60,
        ((language & 0x03C0) >> 5) + 0x60,
        (language & 0x1F) + 0x60,
    )
    return MdhdBox(timescale=timescale, language="".join(map(chr, letters)))


def parse_trun(reader, version, flags):
    """Parse a TRUN payload whose optional fields are selected by ``flags``."""
    sample_count = _read(reader.read_u32, "TRUN box sample count (u32)")
    box = TrunBox(sample_count=sample_count)

    if flags & 0x000001:
        box.data_offset = _read(reader.read_u32, "TRUN box data offset (u32)")
    if flags & 0x000004:
        _read(reader.skip, "TRUN box first sample flags (4 bytes)", 4)

    for _ in range(sample_count):
        sample = TrunSample()
        if flags & 0x000100:
            sample.sample_duration = _read(
                reader.read_u32, "TRUN box sample duration (u32)"
            )
        if flags & 0x000200:
            sample.sample_size = _read(reader.read_u32, "TRUN box sample size (u32)")
        if flags & 0x000400:
            _read(reader.skip, "TRUN box sample flags (u32)", 4)
        if flags & 0x000800:
            if version == 0:
                raw = _read(reader.read_u32, "TRUN box sample time offset (u32)")
                offset = raw - (1 << 32) if raw >= (1 << 31) else raw
            else:
                offset = _read(reader.read_i32, "TRUN box sample time offset (i32)")
            sample.sample_composition_time_offset = offset
        box.sample_data.append(sample)

    return box