"""Codec registry and target-codec matching.

Codec identifiers reported by ffprobe, chosen by users in configuration and
written into the compression log do not always agree on spelling ("hevc",
"h265", "hvc1", ...). This module is the single place that knows which
spellings name the same codec.
"""

from __future__ import annotations

# Groups of equivalent video codec identifiers.
VIDEO_CODEC_ALIASES: dict[str, frozenset[str]] = {
    "hevc": frozenset({"hevc", "h265", "h.265", "x265", "hvc1", "hev1", "libx265"}),
    "h264": frozenset({"h264", "h.264", "avc", "avc1", "x264", "libx264"}),
    "vp9": frozenset({"vp9", "vp09", "libvpx-vp9"}),
    "av1": frozenset({"av1", "av01", "libaom-av1", "libsvtav1", "librav1e"}),
    "mpeg4": frozenset({"mpeg4", "mp4v"}),
}

# Default software encoder per canonical target codec.
DEFAULT_ENCODERS: dict[str, str] = {
    "hevc": "libx265",
    "h264": "libx264",
    "vp9": "libvpx-vp9",
    "av1": "libsvtav1",
}

# Codecs considered "high efficiency" when estimating output size.
EFFICIENT_CODECS: frozenset[str] = frozenset({"hevc", "av1", "vp9"})


def normalize_codec(codec: str | None) -> str | None:
    """Map a codec identifier to its canonical name.

    Args:
        codec: Codec identifier in any known spelling, or None.

    Returns:
        Canonical codec name (e.g. "hevc"), the lowercased input if it is not
        part of any alias group, or None if codec is None or blank.
    """
    if codec is None:
        return None
    value = codec.strip().casefold()
    if not value:
        return None
    for canonical, aliases in VIDEO_CODEC_ALIASES.items():
        if value in aliases:
            return canonical
    return value


def is_target_codec(codec: str | None, target: str) -> bool:
    """Check whether a probed codec already matches the target codec.

    Pure predicate with no side effects: used to decide "skipped" before
    any encode is attempted.

    Args:
        codec: Codec identifier reported by the prober (None if unknown).
        target: Target codec from configuration.

    Returns:
        True if both identifiers name the same codec.
    """
    probed = normalize_codec(codec)
    if probed is None:
        return False
    return probed == normalize_codec(target)


def default_encoder_for(target: str) -> str | None:
    """Return the default ffmpeg encoder for a target codec, if known."""
    canonical = normalize_codec(target)
    if canonical is None:
        return None
    return DEFAULT_ENCODERS.get(canonical)
