# vsdkit

A library for working with fragmented MP4 data:

- a small, callback-driven MP4 box parser,
- discovery of DRM key ids and system ids from `pssh` boxes,
- extraction of WebVTT (`wvtt`) and TTML (`stpp`) subtitles embedded in MP4
  segments, rendered as WebVTT or SubRip.

It needs only the Python standard library (Python 3.10 or newer).

## Installation

```
pip install .
```

## Parsing boxes

```python
from vsdkit.parser import Mp4Parser, children

names = []

def on_trak(box):
    names.append(box.name)
    children(box)

parser = Mp4Parser().box("moov", children).box("trak", on_trak)
parser.parse(data, False, False)
```

`box` declares a basic box and `full_box` a full box; callbacks of full boxes
see `version` and `flags` on the `ParsedBox` they receive, and every callback
gets a `Reader` over the box payload in `box.reader`. `children`,
`sample_description`, `visual_sample_entry` and `alldata` are ready-made
callbacks for common box layouts. A callback can call `box.parser.stop()` to
end parsing early. `type_from_string` and `type_to_string` convert between
four-character box names and their integer codes.

Parse failures raise `vsdkit.errors.Mp4Error`, or its subclasses `ReadError`
(the data ran out) and `DecodeError` (bytes could not be decoded).

## Key ids from PSSH boxes

```python
from vsdkit.pssh.pssh import parse_pssh

pssh = parse_pssh(init_segment)
for key_id in pssh.key_ids:
    print(key_id.system_type, key_id.uuid())
print(pssh.system_ids)
```

`pssh` boxes are looked for under `moov` and `moof`. Key ids listed in version 1
boxes are reported, as are the key ids inside PlayReady objects
(`vsdkit.pssh.playready.parse`); duplicates are dropped.

## Subtitles

```python
from vsdkit.text.mp4_vtt import Mp4VttParser
from vsdkit.text.mp4_ttml import Mp4TtmlParser

vtt = Mp4VttParser.parse_init(data)
subtitles = vtt.parse_media(data, None)
print(subtitles.as_vtt())

ttml = Mp4TtmlParser.parse_init(data)
print(ttml.parse_media(data).as_srt())
```

When the init segment and media segments are separate files, join their bytes
before parsing. Plain TTML documents can be read with `vsdkit.text.ttml.parse`,
whose result turns into `Subtitles` with `into_subtitles()`. `Subtitles` drops
empty and zero-length cues and merges a cue into the previous one when it
continues it with the same text and settings; several `Subtitles` objects can be
joined with `extend`.

## What it does not do

- There is no command-line tool; everything is used from Python.
- It does not download streams, merge segment files or decrypt media.
- The data of Widevine `pssh` boxes is not decoded, so Widevine key ids are
  reported only when a version 1 box lists them in its header.

## Running the tests

```
pip install ".[test]"
pytest
```