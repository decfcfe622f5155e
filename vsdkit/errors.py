"""Exceptions raised while reading and parsing MP4 data."""


class Mp4Error(Exception):
    """An error met while parsing MP4 data."""

    prefix = ""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = str(reason)

    def __str__(self):
        return f"{self.prefix}{self.reason}."


class ReadError(Mp4Error):
    """Raised when a value cannot be read from the data."""

    prefix = "Cannot read "


class DecodeError(Mp4Error):
    """Raised when bytes that were read cannot be decoded."""

    prefix = "Cannot decode "