"""MP4 box parsing, PSSH key ids and subtitle extraction from fragmented MP4."""

__version__ = "0.1.0"