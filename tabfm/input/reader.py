"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing and Alt-modified arrows.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_TOKENS = {
    b"\x03": "CTRL_C",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_ARROW_TOKENS = {b"A": "UP", b"B": "DOWN", b"C": "RIGHT", b"D": "LEFT"}

# Meta-prefixed letters: readline word motions and vi-style history keys.
_META_TOKENS = {
    b"b": "ALT_LEFT",
    b"B": "ALT_LEFT",
    b"f": "ALT_RIGHT",
    b"F": "ALT_RIGHT",
    b"h": "ALT_h",
    b"l": "ALT_l",
    b"k": "ALT_k",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, first: bytes) -> str:
    lead = first[0]
    if lead >= 0xF0:
        extra = 3
    elif lead >= 0xE0:
        extra = 2
    elif lead >= 0xC0:
        extra = 1
    else:
        extra = 0
    data = first
    for _ in range(extra):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def _decode_csi(fd: int) -> str:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq in _ARROW_TOKENS:
        return _ARROW_TOKENS[seq]
    if seq == b"1":
        # ESC [ 1 ; <modifier> <arrow>
        if _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS) != b";":
            return "ESC"
        modifier = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        arrow = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if modifier is None or arrow is None or arrow not in _ARROW_TOKENS:
            return "ESC"
        if modifier in {b"3", b"9"}:
            return f"ALT_{_ARROW_TOKENS[arrow]}"
        if modifier == b"2":
            return f"SHIFT_{_ARROW_TOKENS[arrow]}"
        return "ESC"
    return "ESC"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token from ``fd``; ``""`` means timeout or EOF."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch in _CONTROL_TOKENS:
        return _CONTROL_TOKENS[ch]

    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch)

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq in _META_TOKENS:
        return _META_TOKENS[seq]
    if seq == b"[":
        return _decode_csi(fd)
    if seq == b"\x1b":
        # Some terminals send Alt+arrow as ESC ESC [ <arrow>.
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt == b"[":
            token = _decode_csi(fd)
            if token in _ARROW_TOKENS.values():
                return f"ALT_{token}"
            return token
        if nxt is not None:
            _PENDING_BYTES.append(nxt)
        return "ESC"
    _PENDING_BYTES.append(seq)
    return "ESC"


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "read_key"]
