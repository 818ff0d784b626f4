"""SGR (Select Graphic Rendition) escape sequences.

Reference:
    Standard ECMA-48 (Control Functions for Coded Character Sets)
    <http://www.ecma-international.org/publications/standards/Ecma-048.htm>
    ANSI escape code
    <https://en.wikipedia.org/wiki/ANSI_escape_code>
"""

import re

ESC = "\x1b"

# An escape sequence runs from ESC through the next "m".  An unterminated
# sequence swallows the rest of the string.
_SGR_PATTERN = re.compile(r"\x1b[^m]*m?")


def sgr(code: str) -> str:
    """Build the escape sequence for an SGR parameter string such as ``"31"``."""
    return f"{ESC}[{code}m"


def sgr_256(n: int | str) -> str:
    """Foreground color from the 256-color palette."""
    return sgr(f"38;5;{n}")


def sgr_background_256(n: int | str) -> str:
    """Background color from the 256-color palette."""
    return sgr(f"48;5;{n}")


def strip_sgr(text: str) -> str:
    """Remove every escape sequence from *text*."""
    return _SGR_PATTERN.sub("", text)


RESET = sgr("0")
BOLD = sgr("1")
FAINT = sgr("2")  # not widely supported
ITALICIZED = sgr("3")  # not widely supported
UNDERLINED = sgr("4")
BLINK = sgr("5")
BLINK_RAPID = sgr("6")  # not widely supported
INVERSE = sgr("7")
INVISIBLE = sgr("8")  # not widely supported
CROSSED_OUT = sgr("9")  # not widely supported
DOUBLY_UNDERLINED = sgr("21")  # not widely supported
NORMAL = sgr("22")  # neither bold nor faint
NOT_ITALICIZED = sgr("23")
NOT_UNDERLINED = sgr("24")
STEADY = sgr("25")  # not blinking
POSITIVE = sgr("27")  # not inverse
VISIBLE = sgr("28")
NOT_CROSSED_OUT = sgr("29")

BLACK = sgr("30")
RED = sgr("31")
GREEN = sgr("32")
YELLOW = sgr("33")
BLUE = sgr("34")
MAGENTA = sgr("35")
CYAN = sgr("36")
WHITE = sgr("37")
DEFAULT = sgr("39")

BACKGROUND_BLACK = sgr("40")
BACKGROUND_RED = sgr("41")
BACKGROUND_GREEN = sgr("42")
BACKGROUND_YELLOW = sgr("43")
BACKGROUND_BLUE = sgr("44")
BACKGROUND_MAGENTA = sgr("45")
BACKGROUND_CYAN = sgr("46")
BACKGROUND_WHITE = sgr("47")
BACKGROUND_DEFAULT = sgr("49")

# 16-color support: aixterm colors are the bright versions of the ISO colors
LIGHT_BLACK = sgr("90")  # dark gray
LIGHT_RED = sgr("91")
LIGHT_GREEN = sgr("92")
LIGHT_YELLOW = sgr("93")
LIGHT_BLUE = sgr("94")
LIGHT_MAGENTA = sgr("95")
LIGHT_CYAN = sgr("96")
LIGHT_WHITE = sgr("97")

BACKGROUND_LIGHT_BLACK = sgr("100")  # dark gray
BACKGROUND_LIGHT_RED = sgr("101")
BACKGROUND_LIGHT_GREEN = sgr("102")
BACKGROUND_LIGHT_YELLOW = sgr("103")
BACKGROUND_LIGHT_BLUE = sgr("104")
BACKGROUND_LIGHT_MAGENTA = sgr("105")
BACKGROUND_LIGHT_CYAN = sgr("106")
BACKGROUND_LIGHT_WHITE = sgr("107")
