"""
Telegram MarkdownV2 escaping
"""
import re

# MarkdownV2 reserved: _ * [ ] ( ) ~ ` > # + - = | { } . !
_RESERVED = re.compile(r"([_*\[\]()~`>#+\-=|{}.!])")


def escape(value) -> str:
    """Escape any value for literal display in a MarkdownV2 message"""
    if value is None or value == "":
        return ""
    # Backslashes first so the escapes added below stay intact
    text = str(value).replace("\\", "\\\\")
    return _RESERVED.sub(r"\\\1", text)
