"""
Audio MIME type handling for the transcription service.
"""

DEFAULT_EXTENSION = "m4a"

# First match wins; matched as substrings so parameters like
# "audio/webm;codecs=opus" are handled.
_EXTENSION_TABLE = (
    (("m4a", "x-m4a"), "m4a"),
    (("mp4",), "mp4"),
    (("mpeg", "mp3"), "mp3"),
    (("webm",), "webm"),
    (("ogg",), "ogg"),
    (("flac",), "flac"),
    (("wav", "wave"), "wav"),
)

SUPPORTED_MIME_TYPES = (
    "audio/m4a",
    "audio/x-m4a",
    "audio/mp4",
    "audio/wav",
    "audio/wave",
    "audio/mpeg",
    "audio/mp3",
    "audio/webm",
    "audio/ogg",
    "audio/flac",
    "audio/aac",
)


def extension_for_mime_type(mime_type: str) -> str:
    """File extension for a MIME type; unknown types map to m4a."""
    lowered = (mime_type or "").lower()
    for needles, extension in _EXTENSION_TABLE:
        if any(needle in lowered for needle in needles):
            return extension
    return DEFAULT_EXTENSION


def is_supported_audio_format(mime_type: str) -> bool:
    """True when the MIME type names one of the formats the service documents."""
    if not mime_type:
        return False
    lowered = mime_type.lower()
    return any(fmt in lowered for fmt in SUPPORTED_MIME_TYPES)


def is_acceptable_mime_type(mime_type: str) -> bool:
    """
    Lenient acceptance check used before upload.

    Any audio/* type passes (unrecognized ones are sent as m4a), as does
    anything that matches the extension table.
    """
    if not mime_type:
        return False
    lowered = mime_type.lower()
    if lowered.startswith("audio/"):
        return True
    return any(
        needle in lowered
        for needles, _ in _EXTENSION_TABLE
        for needle in needles
    )
