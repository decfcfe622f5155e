"""A callback-driven parser for the box structure of MP4 files."""

import copy
import functools
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional

from .errors import DecodeError, ReadError
from .reader import Reader


class BoxType(Enum):
    """Whether a box header carries version and flags."""

    BASIC = "basic"
    FULL = "full"


def _read(func, what):
    try:
        return func()
    except EOFError as err:
        raise ReadError(what) from err


@dataclass
class Mp4Parser:
    """Walks MP4 boxes and hands each declared box to its callback."""

    headers: Dict[int, BoxType] = field(default_factory=dict)
    box_definitions: Dict[int, Callable[["ParsedBox"], None]] = field(
        default_factory=dict
    )
    done: bool = False

    def _declare(self, name, box_type, definition):
        code = type_from_string(name)
        self.headers[code] = box_type
        self.box_definitions[code] = definition
        return self

    def box(self, name, definition):
        """Declare ``name`` as a basic box handled by ``definition``."""
        return self._declare(name, BoxType.BASIC, definition)

    def full_box(self, name, definition):
        """Declare ``name`` as a full box handled by ``definition``."""
        return self._declare(name, BoxType.FULL, definition)

    def stop(self):
        """Stop parsing once the current box is done."""
        self.done = True

    def parse(self, data, partial_okay=None, stop_on_partial=None):
        """Parse ``data``, calling the declared callbacks as boxes are met."""
        reader = Reader(data, little_endian=False)
        self.done = False
        while reader.has_more_data() and not self.done:
            self.parse_next(0, reader, partial_okay, stop_on_partial)

    def parse_next(self, abs_start, reader, partial_okay=None, stop_on_partial=None):
        """Parse the next box at the current level of ``reader``."""
        partial_okay = bool(partial_okay)
        stop_on_partial = bool(stop_on_partial)
        start = reader.position

        if stop_on_partial and start + 8 > reader.length:
            self.done = True
            return

        size = _read(reader.read_u32, "box size (u32)")
        code = _read(reader.read_u32, "box type (u32)")
        try:
            name = type_to_string(code)
        except ValueError as err:
            raise DecodeError(f"{code} (u32) to string") from err
        has_64_bit_size = False

        if size == 0:
            size = reader.length - start
        elif size == 1:
            if stop_on_partial and reader.position + 8 > reader.length:
                self.done = True
                return
            size = _read(reader.read_u64, "box size (u64)")
            has_64_bit_size = True

        definition = self.box_definitions.get(code)
        if definition is None:
            # Skip to the end of the box, or to the end of the data if the
            # box claims to run past it.
            remaining = reader.length - reader.position
            skip_length = start + size - reader.position
            if skip_length < 0 or skip_length > remaining:
                skip_length = remaining
            reader.skip(skip_length)
            return

        version = None
        flags = None
        if self.headers[code] is BoxType.FULL:
            if stop_on_partial and reader.position + 4 > reader.length:
                self.done = True
                return
            version_and_flags = _read(reader.read_u32, "box version and flags (u32)")
            version = version_and_flags >> 24
            flags = version_and_flags & 0xFFFFFF

        end = start + size
        if partial_okay and end > reader.length:
            end = reader.length
        if stop_on_partial and end > reader.length:
            self.done = True
            return

        payload_size = end - reader.position
        if payload_size < 0:
            raise ReadError(f"box payload ({payload_size} bytes)")
        payload = b""
        if payload_size > 0:
            payload = _read(
                functools.partial(reader.read_bytes, payload_size),
                f"box payload ({payload_size} bytes)",
            )

        definition(
            ParsedBox(
                name=name,
                parser=copy.copy(self),
                partial_okay=partial_okay,
                start=start + abs_start,
                size=size,
                version=version,
                flags=flags,
                reader=Reader(payload, little_endian=False),
                has_64_bit_size=has_64_bit_size,
            )
        )


@dataclass
class ParsedBox:
    """A box handed to a callback, with a reader over its payload only."""

    name: str = ""
    parser: Mp4Parser = field(default_factory=Mp4Parser)
    partial_okay: bool = False
    start: int = 0
    size: int = 0
    version: Optional[int] = None
    flags: Optional[int] = None
    reader: Reader = field(default_factory=lambda: Reader(b""))
    has_64_bit_size: bool = False

    def header_size(self):
        """Size in bytes of this box's header."""
        size = 8
        if self.has_64_bit_size:
            size += 8
        if self.flags is not None:
            size += 4
        return size


def children(box):
    """Parse the payload of ``box`` as a sequence of child boxes."""
    header_size = box.header_size()
    while box.reader.has_more_data() and not box.parser.done:
        box.parser.parse_next(box.start + header_size, box.reader, box.partial_okay)


def sample_description(box):
    """Parse the payload of ``box`` as a counted list of child boxes."""
    header_size = box.header_size()
    count = _read(box.reader.read_u32, "sample description count (u32)")
    for _ in range(count):
        box.parser.parse_next(box.start + header_size, box.reader, box.partial_okay)
        if box.parser.done:
            break


def visual_sample_entry(box):
    """Skip the fixed visual sample entry fields, then parse child boxes."""
    header_size = box.header_size()
    _read(
        functools.partial(box.reader.skip, 78),
        "visual sample entry reserved 78 bytes",
    )
    while box.reader.has_more_data() and not box.parser.done:
        box.parser.parse_next(box.start + header_size, box.reader, box.partial_okay)


def alldata(callback):
    """Make a box definition that passes the whole payload to ``callback``."""

    def definition(box):
        remaining = box.reader.length - box.reader.position
        data = _read(
            functools.partial(box.reader.read_bytes, remaining),
            f"all data {remaining} bytes",
        )
        callback(data)

    return definition


def type_from_string(name):
    """Convert a four-character box name to its integer code."""
    if len(name) != 4:
        raise ValueError("MP4 box names must be 4 characters long")
    code = 0
    for char in name:
        code = (code << 8) | ord(char)
    return code


def type_to_string(code):
    """Convert an integer box code to its name; raise ValueError if not UTF-8."""
    raw = bytes((code >> shift) & 0xFF for shift in (24, 16, 8, 0))
    return raw.decode("utf-8")