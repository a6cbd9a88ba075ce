# taginput/config/keys.py

from typing import Iterable, List, Union

# Numeric Qt::Key values. Matching by code rather than by character keeps
# separator handling independent of the keyboard layout.
KEY_SPACE = 0x20
KEY_COMMA = 0x2c
KEY_SEMICOLON = 0x3b
KEY_ESCAPE = 0x01000000
KEY_TAB = 0x01000001
KEY_BACKSPACE = 0x01000003
KEY_RETURN = 0x01000004
KEY_ENTER = 0x01000005
KEY_DELETE = 0x01000007
KEY_LEFT = 0x01000012
KEY_UP = 0x01000013
KEY_RIGHT = 0x01000014
KEY_DOWN = 0x01000015

KEY_NAMES = {
    "space": KEY_SPACE,
    "comma": KEY_COMMA,
    "semicolon": KEY_SEMICOLON,
    "escape": KEY_ESCAPE,
    "esc": KEY_ESCAPE,
    "tab": KEY_TAB,
    "backspace": KEY_BACKSPACE,
    "return": KEY_RETURN,
    "enter": KEY_ENTER,
    "delete": KEY_DELETE,
    "left": KEY_LEFT,
    "up": KEY_UP,
    "right": KEY_RIGHT,
    "down": KEY_DOWN,
}


def resolve_key(key: Union[int, str]) -> int:
    """Returns the numeric code for a key given by code, name or single character."""
    if isinstance(key, int):
        return key
    name = key if len(key) == 1 else key.strip()
    if name.lower() in KEY_NAMES:
        return KEY_NAMES[name.lower()]
    if name.isdigit():
        return int(name)
    if len(name) == 1:
        # Qt uses the upper-case code point for printable keys
        return ord(name.upper())
    raise ValueError(f"Unknown key name: {key!r}")


def resolve_keys(keys: Iterable[Union[int, str]]) -> List[int]:
    result = []
    for key in keys:
        code = resolve_key(key)
        if code not in result:
            result.append(code)
    return result
