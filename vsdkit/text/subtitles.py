"""Subtitle cues and their rendering as WebVTT and SubRip."""

import math
from dataclasses import dataclass, replace


@dataclass
class Cue:
    """A timed piece of subtitle text; times are in seconds."""

    start_time: float
    end_time: float
    payload: str
    settings: str = ""
    id: str = ""


def seconds_to_timestamp(seconds, millisecond_sep):
    """Format ``seconds`` as ``HH:MM:SS<sep>mmm``, truncating to milliseconds."""
    millis = seconds * 1000.0
    if math.isnan(millis) or millis <= 0:
        total = 0
    elif math.isinf(millis):
        total = (1 << 64) - 1
    else:
        total = int(millis)
    seconds, milliseconds = divmod(total, 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}{millisecond_sep}{milliseconds:03}"


class Subtitles:
    """An ordered list of cues.

    Empty and zero-length cues are dropped, and a cue that continues the
    previous one with the same text and settings is merged into it.
    """

    def __init__(self, cues):
        self.cues = []
        for cue in cues:
            if not cue.payload or cue.start_time == cue.end_time:
                continue
            if self.cues:
                last = self.cues[-1]
                if (
                    last.end_time == cue.start_time
                    and last.settings == cue.settings
                    and last.payload == cue.payload
                ):
                    last.end_time = cue.end_time
                    continue
            self.cues.append(replace(cue))

    def extend(self, other):
        """Append the cues of ``other`` as they are."""
        self.cues.extend(replace(cue) for cue in other.cues)

    def as_vtt(self):
        """Render the cues as a WebVTT document."""
        parts = ["WEBVTT\n\n"]
        for cue in self.cues:
            parts.append(
                f"{seconds_to_timestamp(cue.start_time, '.')} --> "
                f"{seconds_to_timestamp(cue.end_time, '.')} {cue.settings}\n"
                f"{cue.payload}\n\n"
            )
        return "".join(parts)

    def as_srt(self):
        """Render the cues as a SubRip document."""
        return "".join(
            f"{number}\n"
            f"{seconds_to_timestamp(cue.start_time, ',')} --> "
            f"{seconds_to_timestamp(cue.end_time, ',')}\n"
            f"{cue.payload}\n\n"
            for number, cue in enumerate(self.cues, start=1)
        )