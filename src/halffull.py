"""
halffull.py - Half-width / full-width character conversion
半角 / 全角字符转换

Printable ASCII ('!' .. '~') sits at a fixed offset from its full-width
form in the Halfwidth and Fullwidth Forms block (U+FF01 .. U+FF5E).
The space is special: its full-width form is the ideographic space U+3000.
"""

import logging

logger = logging.getLogger(__name__)

FULL_WIDTH_OFFSET = 0xFEE0
IDEOGRAPHIC_SPACE = '　'


def _as_char(c):
    if isinstance(c, int):
        return chr(c)
    return c


def to_full(c):
    """Return the full-width form of c.

    Args:
        c: A single character, or a keyval (int) of a printable character

    Returns:
        str: the full-width character, or c itself (as str) when there is none
    """
    c = _as_char(c)
    if c == ' ':
        return IDEOGRAPHIC_SPACE
    cp = ord(c)
    if 0x21 <= cp <= 0x7E:
        return chr(cp + FULL_WIDTH_OFFSET)
    return c


def to_half(c):
    '''
    Inverse of to_full(). Characters without a half-width form are returned as is.
    '''
    c = _as_char(c)
    if c == IDEOGRAPHIC_SPACE:
        return ' '
    cp = ord(c)
    if 0xFF01 <= cp <= 0xFF5E:
        return chr(cp - FULL_WIDTH_OFFSET)
    return c
