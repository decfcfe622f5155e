"""Extraction of TTML subtitles carried in MP4 (``stpp``) tracks."""

from ..errors import DecodeError, Mp4Error
from ..parser import Mp4Parser, alldata, children, sample_description
from . import ttml
from .subtitles import Subtitles


class Mp4TtmlParser:
    """Reads TTML documents stored in the ``mdat`` boxes of MP4 segments."""

    @classmethod
    def parse_init(cls, data):
        """Parse an initialization segment; it must hold an ``stpp`` box."""
        saw_stpp = False

        def on_stpp(box):
            nonlocal saw_stpp
            saw_stpp = True
            box.parser.stop()

        (
            Mp4Parser()
            .box("moov", children)
            .box("trak", children)
            .box("mdia", children)
            .box("minf", children)
            .box("stbl", children)
            .full_box("stsd", sample_description)
            .box("stpp", on_stpp)
            .parse(data)
        )

        if not saw_stpp:
            raise Mp4Error("STPP box not found")
        return cls()

    def parse_media(self, data):
        """Parse media segments; cues of every ``mdat`` box are joined in order."""
        saw_mdat = False
        cues = []

        def on_mdat(payload):
            nonlocal saw_mdat
            saw_mdat = True
            try:
                xml = payload.decode("utf-8")
            except UnicodeDecodeError as err:
                raise DecodeError("MDAT box payload as valid utf-8 data") from err
            try:
                document = ttml.parse(xml)
            except DecodeError as err:
                raise DecodeError(f"xml string as ttml content.\n\n{xml}\n\n{err}") from err
            cues.extend(document.into_cues())

        Mp4Parser().box("mdat", alldata(on_mdat)).parse(data, partial_okay=False)

        if not saw_mdat:
            raise Mp4Error("MDAT box not found")
        return Subtitles(cues)