"""Parsing of ``pssh`` boxes and the key ids they carry."""