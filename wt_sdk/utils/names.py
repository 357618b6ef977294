"""
File name sanitization.
Strips characters the API refuses in file names: reserved URL characters
and emoji.
"""

RESERVED_CHARACTERS = frozenset("$&+,/:;=?@")

# Emoji code point ranges (emoticons, pictographs, transport, symbols,
# dingbats, regional indicator flags, supplemental pictographs)
EMOJI_RANGES = (
    (0x1F600, 0x1F64F),
    (0x1F300, 0x1F5FF),
    (0x1F680, 0x1F6FF),
    (0x2600, 0x26FF),
    (0x2700, 0x27BF),
    (0x1F1E6, 0x1F1FF),
    (0x1F900, 0x1F9FF),
)


def is_emoji(char: str) -> bool:
    code = ord(char)
    return any(low <= code <= high for low, high in EMOJI_RANGES)


def is_sanitizable(char: str) -> bool:
    return char in RESERVED_CHARACTERS or is_emoji(char)


def sanitize_name(name: str) -> str:
    """
    Remove reserved characters and emoji from a file name.

    Examples:
        >>> sanitize_name("Japan-01🇯🇵.jpg")
        'Japan-01.jpg'

        >>> sanitize_name("a:b/c?.txt")
        'abc.txt'
    """
    return "".join(char for char in name if not is_sanitizable(char))
