"""Subtitles carried in MP4 segments: WebVTT and TTML."""