"""Scan code set 1 decoding and a buffered keyboard."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Optional

from luix.ring_buffer import RingBuffer

KEY_BUFFER_SIZE = 30
_RELEASE_BIT = 0x80


class KeyCode(Enum):
    """Keys independent of the scan code set."""

    ESCAPE = auto()
    NUM1 = auto()
    NUM2 = auto()
    NUM3 = auto()
    NUM4 = auto()
    NUM5 = auto()
    NUM6 = auto()
    NUM7 = auto()
    NUM8 = auto()
    NUM9 = auto()
    NUM0 = auto()
    MINUS = auto()
    EQUAL = auto()
    BACKSPACE = auto()
    TAB = auto()
    Q = auto()
    W = auto()
    E = auto()
    R = auto()
    T = auto()
    Y = auto()
    U = auto()
    I = auto()  # noqa: E741
    O = auto()  # noqa: E741
    P = auto()
    LEFT_BRACKET = auto()
    RIGHT_BRACKET = auto()
    ENTER = auto()
    LEFT_CTRL = auto()
    A = auto()
    S = auto()
    D = auto()
    F = auto()
    G = auto()
    H = auto()
    J = auto()
    K = auto()
    L = auto()
    SEMICOLON = auto()
    QUOTE = auto()
    BACKTICK = auto()
    LEFT_SHIFT = auto()
    BACKSLASH = auto()
    Z = auto()
    X = auto()
    C = auto()
    V = auto()
    B = auto()
    N = auto()
    M = auto()
    COMMA = auto()
    PERIOD = auto()
    SLASH = auto()
    RIGHT_SHIFT = auto()
    KEYPAD_ASTERISK = auto()
    LEFT_ALT = auto()
    SPACE = auto()
    CAPS_LOCK = auto()
    F1 = auto()
    F2 = auto()
    F3 = auto()
    F4 = auto()
    F5 = auto()
    F6 = auto()
    F7 = auto()
    F8 = auto()
    F9 = auto()
    F10 = auto()
    NUM_LOCK = auto()
    SCROLL_LOCK = auto()
    KEYPAD7 = auto()
    KEYPAD8 = auto()
    KEYPAD9 = auto()
    KEYPAD_MINUS = auto()
    KEYPAD4 = auto()
    KEYPAD5 = auto()
    KEYPAD6 = auto()
    KEYPAD_PLUS = auto()
    KEYPAD1 = auto()
    KEYPAD2 = auto()
    KEYPAD3 = auto()
    KEYPAD0 = auto()
    KEYPAD_PERIOD = auto()
    F11 = auto()
    F12 = auto()
    UNKNOWN = auto()


class ScanCodeSet1(IntEnum):
    """Make codes of scan code set 1."""

    NONE = 0x00
    ESCAPE = 0x01
    NUM1 = 0x02
    NUM2 = 0x03
    NUM3 = 0x04
    NUM4 = 0x05
    NUM5 = 0x06
    NUM6 = 0x07
    NUM7 = 0x08
    NUM8 = 0x09
    NUM9 = 0x0A
    NUM0 = 0x0B
    MINUS = 0x0C
    EQUAL = 0x0D
    BACKSPACE = 0x0E
    TAB = 0x0F
    Q = 0x10
    W = 0x11
    E = 0x12
    R = 0x13
    T = 0x14
    Y = 0x15
    U = 0x16
    I = 0x17  # noqa: E741
    O = 0x18  # noqa: E741
    P = 0x19
    LEFT_BRACKET = 0x1A
    RIGHT_BRACKET = 0x1B
    ENTER = 0x1C
    LEFT_CTRL = 0x1D
    A = 0x1E
    S = 0x1F
    D = 0x20
    F = 0x21
    G = 0x22
    H = 0x23
    J = 0x24
    K = 0x25
    L = 0x26
    SEMICOLON = 0x27
    QUOTE = 0x28
    BACKTICK = 0x29
    LEFT_SHIFT = 0x2A
    BACKSLASH = 0x2B
    Z = 0x2C
    X = 0x2D
    C = 0x2E
    V = 0x2F
    B = 0x30
    N = 0x31
    M = 0x32
    COMMA = 0x33
    PERIOD = 0x34
    SLASH = 0x35
    RIGHT_SHIFT = 0x36
    KEYPAD_ASTERISK = 0x37
    LEFT_ALT = 0x38
    SPACE = 0x39
    CAPS_LOCK = 0x3A
    F1 = 0x3B
    F2 = 0x3C
    F3 = 0x3D
    F4 = 0x3E
    F5 = 0x3F
    F6 = 0x40
    F7 = 0x41
    F8 = 0x42
    F9 = 0x43
    F10 = 0x44
    NUM_LOCK = 0x45
    SCROLL_LOCK = 0x46
    KEYPAD7 = 0x47
    KEYPAD8 = 0x48
    KEYPAD9 = 0x49
    KEYPAD_MINUS = 0x4A
    KEYPAD4 = 0x4B
    KEYPAD5 = 0x4C
    KEYPAD6 = 0x4D
    KEYPAD_PLUS = 0x4E
    KEYPAD1 = 0x4F
    KEYPAD2 = 0x50
    KEYPAD3 = 0x51
    KEYPAD0 = 0x52
    KEYPAD_PERIOD = 0x53
    NONE_1 = 0x54
    NONE_2 = 0x55
    F11 = 0x56
    F12 = 0x57

    def to_keycode(self) -> KeyCode:
        """The key this scan code stands for."""
        return KeyCode.__members__.get(self.name, KeyCode.UNKNOWN)


_CHARACTERS: dict[KeyCode, str] = {
    KeyCode.NUM1: "1",
    KeyCode.NUM2: "2",
    KeyCode.NUM3: "3",
    KeyCode.NUM4: "4",
    KeyCode.NUM5: "5",
    KeyCode.NUM6: "6",
    KeyCode.NUM7: "7",
    KeyCode.NUM8: "8",
    KeyCode.NUM9: "9",
    KeyCode.NUM0: "0",
    KeyCode.MINUS: "-",
    KeyCode.EQUAL: "=",
    KeyCode.BACKSPACE: "\x08",
    KeyCode.TAB: "\t",
    KeyCode.Q: "q",
    KeyCode.W: "w",
    KeyCode.E: "e",
    KeyCode.R: "r",
    KeyCode.T: "t",
    KeyCode.Y: "y",
    KeyCode.U: "u",
    KeyCode.I: "i",
    KeyCode.O: "o",
    KeyCode.P: "p",
    KeyCode.LEFT_BRACKET: "[",
    KeyCode.RIGHT_BRACKET: "]",
    KeyCode.ENTER: "\n",
    KeyCode.LEFT_CTRL: "\x1f",
    KeyCode.A: "a",
    KeyCode.S: "s",
    KeyCode.D: "d",
    KeyCode.F: "f",
    KeyCode.G: "g",
    KeyCode.H: "h",
    KeyCode.J: "j",
    KeyCode.K: "k",
    KeyCode.L: "l",
    KeyCode.SEMICOLON: ";",
    KeyCode.QUOTE: "'",
    KeyCode.BACKTICK: "`",
    KeyCode.LEFT_SHIFT: "\x1f",
    KeyCode.BACKSLASH: "\\",
    KeyCode.Z: "z",
    KeyCode.X: "x",
    KeyCode.C: "c",
    KeyCode.V: "v",
    KeyCode.B: "b",
    KeyCode.N: "n",
    KeyCode.M: "m",
    KeyCode.COMMA: ",",
    KeyCode.PERIOD: ".",
    KeyCode.SLASH: "/",
    KeyCode.KEYPAD_ASTERISK: "*",
    KeyCode.SPACE: " ",
    KeyCode.KEYPAD7: "7",
    KeyCode.KEYPAD8: "8",
    KeyCode.KEYPAD9: "9",
    KeyCode.KEYPAD_MINUS: "-",
    KeyCode.KEYPAD4: "4",
    KeyCode.KEYPAD5: "5",
    KeyCode.KEYPAD6: "6",
    KeyCode.KEYPAD_PLUS: "+",
    KeyCode.KEYPAD1: "1",
    KeyCode.KEYPAD2: "2",
    KeyCode.KEYPAD3: "3",
    KeyCode.KEYPAD0: "0",
    KeyCode.KEYPAD_PERIOD: ".",
}


@dataclass(frozen=True)
class KeyEvent:
    """A key press: the raw scan code and the key it maps to."""

    key: int
    key_code: KeyCode

    def decode(self) -> Optional[str]:
        """The character the key produces, or None for keys without one."""
        return _CHARACTERS.get(self.key_code)


class Keyboard:
    """Turns raw scan codes into buffered key events."""

    def __init__(self, capacity: int = KEY_BUFFER_SIZE) -> None:
        self._events: RingBuffer[KeyEvent] = RingBuffer(capacity)

    def handle_key(self, key: int) -> None:
        """Record a scan code; key releases are ignored."""
        if not 0 <= key <= 0xFF:
            raise ValueError(f"scan code out of byte range: {key}")
        if key & _RELEASE_BIT:
            return
        try:
            key_code = ScanCodeSet1(key).to_keycode()
        except ValueError:
            key_code = KeyCode.UNKNOWN
        self._events.push(KeyEvent(key=key, key_code=key_code))

    def next_event(self) -> Optional[KeyEvent]:
        """The oldest pending key event, or None."""
        return self._events.pop()