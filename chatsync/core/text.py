"""Text sanitization and preview rendering."""

import re

from chatsync.schemas.message import Message, MessageKind

MEDIA_PLACEHOLDERS = {
    MessageKind.AUDIO: "\N{MICROPHONE} Audio Message",
    MessageKind.IMAGE: "\N{CAMERA} Image",
    MessageKind.FILE: "\N{FILE FOLDER} File",
}

ID_ABBREVIATION_LENGTH = 20

_NON_ASCII = re.compile(r"[^\x00-\x7F]")


def sanitize_text(text: str) -> str:
    """Return a display-safe copy of backend text.

    URL-encoded plus signs become spaces, surrogate pairs that arrive as two
    code points are joined, and lone surrogates are dropped. A non-empty input
    that sanitizes to nothing yields a single space.
    """
    if not text:
        return text

    try:
        cleaned = text.replace("+", " ")
        out: list[str] = []
        i = 0
        while i < len(cleaned):
            code = ord(cleaned[i])
            if 0xD800 <= code <= 0xDBFF:
                if i + 1 < len(cleaned) and 0xDC00 <= ord(cleaned[i + 1]) <= 0xDFFF:
                    low = ord(cleaned[i + 1])
                    out.append(chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)))
                    i += 2
                    continue
            elif not 0xDC00 <= code <= 0xDFFF:
                out.append(cleaned[i])
            i += 1
        result = "".join(out)
        return result or " "
    except Exception:
        return _NON_ASCII.sub("?", text)


def preview_for(message: Message) -> str:
    """Render the sidebar preview for a message."""
    if message.kind is MessageKind.TEXT:
        return sanitize_text(message.text)
    return MEDIA_PLACEHOLDERS[message.kind]


def abbreviate_id(contact_id: str, length: int = ID_ABBREVIATION_LENGTH) -> str:
    """Shorten an opaque contact address for display."""
    if len(contact_id) <= length:
        return contact_id
    return f"{contact_id[:length]}..."
