"""Parsing of TTML documents into subtitle cues."""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List

from ..errors import DecodeError
from .subtitles import Cue, Subtitles

_PREFIX = re.compile(r"[<\s/]([A-Za-z_][\w.-]*):[A-Za-z_]")


def _local(name):
    return name.rsplit("}", 1)[-1]


def _attrs(element):
    return {_local(key): value for key, value in element.attrib.items()}


def _text(element):
    return "".join(element.itertext())


@dataclass
class Paragraph:
    """A ``p`` element: a timed line of text."""

    begin: str
    end: str
    value: str = ""


@dataclass
class Div:
    """A ``div`` element holding paragraphs."""

    paragraphs: List[Paragraph] = field(default_factory=list)


@dataclass
class TT:
    """A parsed TTML document: the divisions of its body."""

    divs: List[Div] = field(default_factory=list)

    def into_cues(self):
        """Convert every paragraph into a cue."""
        cues = []
        for div in self.divs:
            for paragraph in div.paragraphs:
                payload = paragraph.value
                for old, new in (
                    ("{b}", "<b>"),
                    ("{/b}", "</b>"),
                    ("{i}", "<i>"),
                    ("{/i}", "</i>"),
                    ("{u}", "<u>"),
                    ("{/u}", "</u>"),
                    ("{font", "<font"),
                    ("{/font}", "</font>"),
                ):
                    payload = payload.replace(old, new)
                cues.append(
                    Cue(
                        start_time=_seconds(paragraph.begin),
                        end_time=_seconds(paragraph.end),
                        payload=payload,
                    )
                )
        return cues

    def into_subtitles(self):
        """Convert the document into subtitles."""
        return Subtitles(self.into_cues())


def _seconds(value):
    try:
        return duration_to_seconds(value)
    except ValueError as err:
        raise DecodeError(f"{value} as a duration in seconds") from err


def _parse_float(text):
    if not text or any(ch.isspace() or ch == "_" for ch in text):
        raise ValueError(f"invalid float literal: {text!r}")
    return float(text)


def duration_to_seconds(value):
    """Convert a TTML clock time such as ``00:01:02.5`` or ``3.2s`` to seconds.

    With four or more fields the last is read as milliseconds.
    """
    value = value.replace("s", "").replace(",", ".")
    parts = value.split(":")
    fields = iter(reversed(parts))
    total = 0.0
    if len(parts) >= 4:
        total += _parse_float(next(fields)) / 1000.0
    for scale, part in zip((1.0, 60.0, 3600.0), fields):
        total += _parse_float(part) * scale
    return total


def _span_element(fragment):
    prefixes = sorted(
        {p for p in _PREFIX.findall(fragment) if p not in ("xml", "xmlns")}
    )
    declarations = "".join(f' xmlns:{p}="urn:{p}"' for p in prefixes)
    try:
        wrapper = ET.fromstring(f"<wrapper{declarations}>{fragment}</wrapper>")
    except ET.ParseError as err:
        raise DecodeError(f"span {fragment}") from err
    if len(wrapper) == 0:
        raise DecodeError(f"span {fragment}")
    return wrapper[0]


def _format_span(fragment):
    element = _span_element(fragment)
    attrs = _attrs(element)
    value = _text(element)

    if attrs.get("fontWeight") == "bold":
        value = f"{{b}}{value}{{/b}}"
    if attrs.get("fontStyle") == "italic":
        value = f"{{i}}{value}{{/i}}"
    if attrs.get("textDecoration") == "underline":
        value = f"{{u}}{value}{{/u}}"
    color = attrs.get("color")
    if color is not None:
        value = f'{{font color="{color}">{value}{{/font}}'
        value = f'<font color="{color}">{value}</font>'
    return value


def _flatten_spans(xml):
    while True:
        start = xml.find("<span")
        end = xml.find("span>")
        if start < 0 or end < 0:
            return xml
        if end + 5 < start:
            raise DecodeError("span elements as balanced markup")
        span_match = xml[start:end + 5]
        sub_span = xml[start + 5:end + 5]
        sub_start = sub_span.find("<span")
        sub_end = sub_span.find("span>")
        if sub_start >= 0 and sub_end >= 0:
            if sub_end + 5 < sub_start:
                raise DecodeError("span elements as balanced markup")
            match = sub_span[sub_start:sub_end + 5]
        else:
            match = span_match
        xml = xml.replace(match, _format_span(match))


def parse(xml):
    """Parse a TTML document string into a :class:`TT`."""
    xml = xml.replace("<br></br>", "\n").replace("<br/>", "\n").replace("<br />", "\n")
    xml = _flatten_spans(xml)

    try:
        root = ET.fromstring(xml)
    except ET.ParseError as err:
        raise DecodeError(f"xml as ttml content ({err})") from err

    body = next((child for child in root if _local(child.tag) == "body"), None)
    if body is None:
        raise DecodeError("ttml content: missing body element")

    tt = TT()
    for div_element in body:
        if _local(div_element.tag) != "div":
            continue
        div = Div()
        for p in div_element:
            if _local(p.tag) != "p":
                continue
            attrs = _attrs(p)
            for name in ("begin", "end"):
                if name not in attrs:
                    raise DecodeError(f"ttml paragraph: missing {name} attribute")
            div.paragraphs.append(
                Paragraph(begin=attrs["begin"], end=attrs["end"], value=_text(p))
            )
        tt.divs.append(div)
    return tt