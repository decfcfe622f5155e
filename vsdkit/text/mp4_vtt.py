"""Extraction of WebVTT cues carried in fragmented MP4 (``wvtt``) tracks."""

import math
from dataclasses import dataclass

from ..errors import DecodeError, Mp4Error, ReadError
from ..parser import Mp4Parser, alldata, children, sample_description, type_to_string
from ..reader import Reader
from .boxes import parse_mdhd, parse_tfdt, parse_tfhd, parse_trun
from .subtitles import Cue, Subtitles


def _read(func, what, *args):
    try:
        return func(*args)
    except EOFError as err:
        raise ReadError(what) from err


def _signed32(value):
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def _ratio(time, timescale):
    if timescale:
        return time / timescale
    if time == 0:
        return math.nan
    return math.inf if time > 0 else -math.inf


def _decode_utf8(data, what):
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise DecodeError(what) from err


@dataclass
class Mp4VttParser:
    """Reads WebVTT cues from MP4 segments using the track's timescale."""

    timescale: int

    @classmethod
    def parse_init(cls, data):
        """Parse an initialization segment; it must hold a ``wvtt`` box."""
        seen_entries = []
        timescale = None

        def on_mdhd(box):
            nonlocal timescale
            if box.version not in (0, 1):
                raise Mp4Error("MDHD box version can only be 0 or 1")
            timescale = parse_mdhd(box.reader, box.version).timescale

        def on_wvtt(box):
            # A valid vtt init segment, though it holds no subtitles yet.
            seen_entries.append(box.name)

        (
            Mp4Parser()
            .box("moov", children)
            .box("trak", children)
            .box("mdia", children)
            .full_box("mdhd", on_mdhd)
            .box("minf", children)
            .box("stbl", children)
            .full_box("stsd", sample_description)
            .box("wvtt", on_wvtt)
            .parse(data)
        )

        if "wvtt" not in seen_entries:
            raise Mp4Error("WVTT box not found")
        if timescale is None:
            raise Mp4Error("Missing timescale (should exist inside MDHD box)")
        return cls(timescale=timescale)

    def parse_media(self, data, period_start=None):
        """Parse media segments into subtitles; times are shifted by ``period_start``."""
        period_start = 0.0 if period_start is None else float(period_start)
        timescale = self.timescale

        base_time = 0
        presentations = []
        saw_tfdt = False
        saw_trun = False
        default_duration = None
        cues = []

        def on_tfdt(box):
            nonlocal saw_tfdt, base_time
            saw_tfdt = True
            if box.version not in (0, 1):
                raise Mp4Error("TFDT version can only be 0 or 1")
            base_time = parse_tfdt(box.reader, box.version).base_media_decode_time

        def on_tfhd(box):
            nonlocal default_duration
            if box.flags is None:
                raise Mp4Error("TFHD box should have a valid flags value")
            default_duration = parse_tfhd(box.reader, box.flags).default_sample_duration

        def on_trun(box):
            nonlocal saw_trun, presentations
            saw_trun = True
            if box.version is None:
                raise Mp4Error("TRUN box should have a valid version value")
            if box.flags is None:
                raise Mp4Error("TRUN box should have a valid flags value")
            presentations = parse_trun(box.reader, box.version, box.flags).sample_data

        def on_mdat(payload):
            if not saw_tfdt and not saw_trun:
                raise Mp4Error("Some required boxes (either TFDT or TRUN) are missing")
            cues.extend(
                _parse_mdat(
                    timescale,
                    period_start,
                    base_time,
                    default_duration,
                    presentations,
                    payload,
                )
            )

        (
            Mp4Parser()
            .box("moof", children)
            .box("traf", children)
            .full_box("tfdt", on_tfdt)
            .full_box("tfhd", on_tfhd)
            .full_box("trun", on_trun)
            .box("mdat", alldata(on_mdat))
            .parse(data, partial_okay=False)
        )

        return Subtitles(cues)


def _parse_mdat(timescale, period_start, base_time, default_duration, presentations, raw_payload):
    cues = []
    current_time = base_time
    reader = Reader(raw_payload, little_endian=False)

    for presentation in presentations:
        # Several payloads of one presentation share its start time and duration.
        duration = presentation.sample_duration
        if duration is None:
            duration = default_duration
        offset = presentation.sample_composition_time_offset
        start_time = base_time + offset if offset is not None else current_time
        current_time = start_time + (duration or 0)

        total_size = 0
        while True:
            payload_size = _signed32(_read(reader.read_u32, "payload size (u32)"))
            total_size += payload_size

            payload_type = _read(reader.read_u32, "payload type (u32)")
            try:
                payload_name = type_to_string(payload_type)
            except ValueError as err:
                raise DecodeError("payload name as valid utf-8 data") from err

            body_size = payload_size - 8
            payload = None
            if payload_name == "vttc":
                if body_size > 0:
                    payload = _read(
                        reader.read_bytes, f"payload data ({body_size} bytes)", body_size
                    )
            else:
                # An empty cue (vtte) or an unknown box: skip whatever it holds.
                if body_size < 0:
                    raise ReadError(f"payload data ({body_size} bytes)")
                _read(reader.skip, f"payload data ({body_size} bytes)", body_size)

            if duration is None:
                raise Mp4Error("WVTT sample duration unknown, and no default found")

            if payload is not None:
                cue = _parse_vttc(
                    payload,
                    period_start + _ratio(start_time, timescale),
                    period_start + _ratio(current_time, timescale),
                )
                if cue is not None:
                    cues.append(cue)

            sample_size = presentation.sample_size
            if sample_size is not None and total_size > _signed32(sample_size):
                raise Mp4Error(
                    "The samples do not fit evenly into the sample sizes given in the TRUN box"
                )
            # Without a sample size, one presentation holds a single cue.
            if sample_size is None or total_size >= _signed32(sample_size):
                break

    if reader.has_more_data():
        raise Mp4Error(
            "MDAT which contain VTT cues and non-VTT data are not currently supported"
        )
    return cues


def _parse_vttc(data, start_time, end_time):
    fields = {"payload": "", "id": "", "settings": ""}

    def store(key, what):
        def callback(raw):
            fields[key] = _decode_utf8(raw, what)

        return callback

    (
        Mp4Parser()
        .box("payl", alldata(store("payload", "VTTC box payload as valid utf-8 data")))
        .box("iden", alldata(store("id", "VTTC box id as valid utf-8 data")))
        .box("sttg", alldata(store("settings", "VTTC box setting as valid utf-8 data")))
        .parse(data)
    )

    if not fields["payload"]:
        return None
    return Cue(
        start_time=start_time,
        end_time=end_time,
        payload=fields["payload"],
        settings=fields["settings"],
        id=fields["id"],
    )