"""Token tables for stream classification.

Kept apart from the pipeline so the vocabularies can be tuned and tested on
their own.  All matching happens against upper-cased text; entries keep their
display spelling because matched tokens are reported back verbatim.
"""

from __future__ import annotations

from availarr.domain.entities.availability import StreamQuality

# --- Resolution ---

QUALITY_PRIORITY: dict[str, int] = {
    "2160p": 5,
    "4K": 5,
    "1080p": 3,
    "720p": 2,
    "480p": 1,
    "CAM": 0,
    "TS": 0,
    "HDTS": 0,
    "HDTC": 0,
    "SCR": 0,
    "DVDSCR": 0,
}

MIN_QUALITY_PRIORITY = int(StreamQuality.UHD_4K)

UHD_TOKENS: tuple[str, ...] = ("2160P", "4K", "UHD")

# Checked top to bottom, substring match.
QUALITY_TOKENS: tuple[tuple[tuple[str, ...], StreamQuality], ...] = (
    (UHD_TOKENS, StreamQuality.UHD_4K),
    (("1080P",), StreamQuality.HD_1080P),
    (("720P",), StreamQuality.HD_720P),
    (("480P",), StreamQuality.SD),
)

# --- Release source ---

VALID_SOURCES: tuple[str, ...] = (
    "WEB-DL",
    "WEBRip",
    "WEBDL",
    "WEB",
    "BluRay",
    "BDRip",
    "BRRip",
    "HDRip",
    "HDTV",
    "DVDRip",
    "Remux",
)

EXCLUDED_SOURCES: tuple[str, ...] = (
    "CAM",
    "HDCAM",
    "CAMRip",
    "TS",
    "HDTS",
    "TELESYNC",
    "TC",
    "HDTC",
    "TELECINE",
    "SCR",
    "DVDSCR",
    "SCREENER",
    "R5",
    "R6",
    "PDVD",
    "PreDVD",
    "PPVRip",
    "KORSUB",
    "HC",
    "HCHDRip",
)

# Substring patterns, no boundary check.
LOW_QUALITY_PATTERNS: tuple[str, ...] = (
    "CAM",
    "CAMRIP",
    "HDCAM",
    "TELESYNC",
    "TELECINE",
    "HDTS",
    "PDVD",
    "PREDVD",
    "HC-",
    "-HC",
    ".HC.",
    "KORSUB",
    "HARDCODED",
    "HDRIP-HC",
    "V1-CAM",
    "V2-CAM",
    "V3-CAM",
    "NEWCAM",
    "CLEAN.CAM",
    "CLEAN-CAM",
    "PROPER.CAM",
)

# --- Audio ---

AUDIO_CODEC_PRIORITY: dict[str, int] = {
    # Lossless / object-based
    "ATMOS": 10,
    "TRUEHD": 9,
    "TRUEHD.ATMOS": 10,
    "DTS-HD": 8,
    "DTS-HD.MA": 9,
    "DTS:X": 9,
    "LPCM": 8,
    "FLAC": 8,
    # Lossy
    "DTS": 6,
    "DD+": 6,
    "DDP": 6,
    "EAC3": 6,
    "E-AC3": 6,
    "AC3": 5,
    "DD5.1": 5,
    "DD7.1": 6,
    "AAC": 4,
    "MP3": 2,
    "OPUS": 3,
}

PREFERRED_AUDIO_CODECS: tuple[str, ...] = (
    "ATMOS",
    "TRUEHD",
    "DTS-HD",
    "DTS-HD.MA",
    "DTS:X",
    "LPCM",
    "FLAC",
    "DTS",
    "DD+",
    "DDP",
    "EAC3",
    "E-AC3",
    "DD7.1",
    "DD5.1",
    "AC3",
)

HIGH_QUALITY_AUDIO_PRIORITY = 5

# --- Video ---

PREFERRED_VIDEO_CODECS: tuple[str, ...] = (
    "HEVC",
    "H.265",
    "H265",
    "x265",
    "HDR",
    "HDR10",
    "HDR10+",
    "DOLBY.VISION",
    "DV",
    "H.264",
    "H264",
    "x264",
    "AVC",
)

HDR_TOKENS: tuple[str, ...] = (
    "HDR",
    "HDR10",
    "HDR10+",
    "DOLBY VISION",
    "DOLBY.VISION",
    "DV",
)
