"""Key ids from PlayReady objects stored in PSSH boxes."""

import base64
import binascii
import struct
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import DecodeError, Mp4Error, ReadError
from ..reader import Reader


def _read(func, what, *args):
    try:
        return func(*args)
    except (EOFError, ValueError) as err:
        raise ReadError(what) from err


def _local(name):
    return name.rsplit("}", 1)[-1]


def _child(element, name):
    return next((child for child in element if _local(child.tag) == name), None)


def _attr(element, name):
    for key, value in element.attrib.items():
        if _local(key) == name:
            return value
    return None


def _kid_value(element):
    value = _attr(element, "VALUE")
    if value is None:
        raise DecodeError("PlayReady header KID element without a VALUE attribute")
    return value


def _decode_kid(encoded):
    try:
        return base64.b64decode(encoded, validate=True).hex()
    except (binascii.Error, ValueError) as err:
        raise DecodeError(f"PlayReady key id {encoded} as base64 data") from err


@dataclass
class WrmHeader:
    """The parts of a PlayReady ``WRMHEADER`` that carry key ids (base64)."""

    version: str
    data_kid: Optional[str] = None
    protect_info_kid: Optional[str] = None
    protect_info_kids: List[str] = field(default_factory=list)

    def kids(self):
        """Return the key ids of this header in hex, as the version defines them."""
        if self.version == "4.0.0.0":
            encoded = [self.data_kid] if self.data_kid is not None else []
        elif self.version == "4.1.0.0":
            encoded = [self.protect_info_kid] if self.protect_info_kid is not None else []
        elif self.version in ("4.2.0.0", "4.3.0.0"):
            encoded = [self.protect_info_kid] if self.protect_info_kid is not None else []
            encoded.extend(self.protect_info_kids)
        else:
            raise Mp4Error(
                f"Unsupported PSSH box playready object header version v{self.version}"
            )
        return [_decode_kid(kid) for kid in encoded]


def parse_wrm_header(xml):
    """Parse the XML text of a ``WRMHEADER`` record."""
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as err:
        raise DecodeError(f"PSSH box playready object record data i.e. {xml}\n\n{err}") from err

    version = _attr(root, "version")
    if version is None:
        raise DecodeError("PlayReady header without a version attribute")
    header = WrmHeader(version=version)

    data = _child(root, "DATA")
    if data is None:
        return header

    kid = _child(data, "KID")
    if kid is not None:
        header.data_kid = "".join(kid.itertext())

    protect_info = _child(data, "PROTECTINFO")
    if protect_info is not None:
        kid = _child(protect_info, "KID")
        if kid is not None:
            header.protect_info_kid = _kid_value(kid)
        kids = _child(protect_info, "KIDS")
        if kids is not None:
            header.protect_info_kids = [
                _kid_value(child) for child in kids if _local(child.tag) == "KID"
            ]
    return header


def parse(data):
    """Return the hex key ids found in a PlayReady object."""
    reader = Reader(data, little_endian=True)
    size = _read(reader.read_u32, "PSSH box playready object size (u32)")
    if size != len(data):
        raise Mp4Error("Invalid length of PSSH box playready object")

    count = _read(reader.read_u16, "PSSH box playready object record count (u16)")
    kids = []

    for _ in range(count):
        record_type = _read(reader.read_u16, "PSSH box playready object record type (u16)")
        record_len = _read(reader.read_u16, "PSSH box playready object record size (u16)")
        units = _read(
            reader.read_u16_array,
            f"PSSH box playready object record data ({record_len} bytes)",
            record_len,
        )

        if record_type == 1:
            raw = struct.pack(f"<{len(units)}H", *units)
            try:
                xml = raw.decode("utf-16-le")
            except UnicodeDecodeError as err:
                raise DecodeError(
                    "PSSH box playready object record data as valid utf-16 data (little endian)"
                ) from err
            kids.extend(parse_wrm_header(xml).kids())
        elif record_type in (2, 3):
            continue
        else:
            raise Mp4Error(f"Invalid PSSH box playready object record type {record_type}")

    if reader.has_more_data():
        raise ReadError("PSSH box extra data after playready object records")
    return kids