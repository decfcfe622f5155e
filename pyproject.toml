[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vsdkit"
version = "0.1.0"
description = "MP4 box parsing, PSSH key id discovery and extraction of subtitles from fragmented MP4"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "mp4",
    "isobmff",
    "pssh",
    "playready",
    "webvtt",
    "ttml",
    "subrip",
    "subtitles",
    "dash",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video",
    "Topic :: Multimedia :: Video :: Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vsdkit"]

[tool.hatch.build.targets.sdist]
include = ["vsdkit", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
