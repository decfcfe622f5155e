"""Key ids and DRM system ids from the PSSH boxes of MP4 data."""

from dataclasses import dataclass, field
from typing import List

from ..errors import Mp4Error, ReadError
from ..parser import Mp4Parser, children
from . import playready

COMMON_SYSTEM_ID = "1077efecc0b24d02ace33c1e52e2fb4b"
PLAYREADY_SYSTEM_ID = "9a04f07998404286ab92e65be0885f95"
WIDEVINE_SYSTEM_ID = "edef8ba979d64acea3c827dcd51d21ed"


@dataclass(frozen=True)
class KeyIdSystemType:
    """The DRM system a key id belongs to; unknown systems carry their hex id."""

    label: str

    @classmethod
    def other(cls, system_id):
        return cls(system_id)

    def __str__(self):
        return self.label


KeyIdSystemType.COMMON = KeyIdSystemType("comman")
KeyIdSystemType.PLAYREADY = KeyIdSystemType("playready")
KeyIdSystemType.WIDEVINE = KeyIdSystemType("widevine")


@dataclass
class KeyId:
    """A key id in hex, with the system it was found for."""

    system_type: KeyIdSystemType
    value: str

    def uuid(self):
        """Format the key id as a dashed UUID."""
        if len(self.value) < 20:
            raise ValueError(f"key id {self.value!r} is too short for a uuid")
        value = self.value
        return f"{value[:8]}-{value[8:12]}-{value[12:16]}-{value[16:20]}-{value[20:]}"


@dataclass
class Pssh:
    """Key ids (without duplicates) and hex system ids of all PSSH boxes."""

    key_ids: List[KeyId] = field(default_factory=list)
    system_ids: List[str] = field(default_factory=list)


def _read(func, what, *args):
    try:
        return func(*args)
    except EOFError as err:
        raise ReadError(what) from err


def parse_pssh(data):
    """Collect the PSSH boxes found under ``moov`` and ``moof`` in ``data``."""
    key_ids = []
    system_ids = []

    def on_pssh(box):
        if box.version is None:
            raise Mp4Error("PSSH boxes are full boxes and must have a valid version")
        if box.flags is None:
            raise Mp4Error("PSSH boxes are full boxes and must have a valid flag")
        if box.version > 1:
            return

        reader = box.reader
        system_id = _read(reader.read_bytes, "PSSH box system id (16 bytes)", 16).hex()

        if box.version > 0:
            count = _read(reader.read_u32, "PSSH box number of key ids (u32)")
            system_type = (
                KeyIdSystemType.COMMON
                if system_id == COMMON_SYSTEM_ID
                else KeyIdSystemType.other(system_id)
            )
            for _ in range(count):
                kid = _read(reader.read_bytes, "PSSH box key id (16 bytes)", 16).hex()
                key_ids.append(KeyId(system_type=system_type, value=kid))

        size = _read(reader.read_u32, "PSSH box data size (u32)")
        pssh_data = _read(reader.read_bytes, f"PSSH box data ({size} bytes)", size)

        if system_id == PLAYREADY_SYSTEM_ID:
            key_ids.extend(
                KeyId(system_type=KeyIdSystemType.PLAYREADY, value=kid)
                for kid in playready.parse(pssh_data)
            )

        system_ids.append(system_id)

    (
        Mp4Parser()
        .box("moov", children)
        .box("moof", children)
        .full_box("pssh", on_pssh)
        .parse(data)
    )

    seen = set()
    unique = []
    for key_id in key_ids:
        if key_id.value not in seen:
            seen.add(key_id.value)
            unique.append(key_id)
    return Pssh(key_ids=unique, system_ids=system_ids)