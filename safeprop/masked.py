# -*- coding: utf-8 -*-
"""Masked echo for interactive secret entry."""

import os
import sys
from typing import IO, Optional, Union

MASK_CHAR = "*"
LINE_TERMINATORS = "\r\n"
_BACKSPACES = ("\x7f", "\b")
_EOT = "\x04"


class MaskedWriter:
    """
    Output filter over any writable sink.

    While muted, everything except line terminators is replaced by the mask
    character before it reaches the sink; unmuted writes pass through. Every
    write is flushed straight away so the echo never lags behind the input.
    """

    def __init__(self, sink: IO, mask: str = MASK_CHAR) -> None:
        if len(mask) != 1:
            raise ValueError("mask must be a single character")
        self._sink = sink
        self._mask = mask
        self._muted = False

    @property
    def muted(self) -> bool:
        return self._muted

    def mute(self) -> None:
        self._muted = True

    def unmute(self) -> None:
        self._muted = False

    def _masked(self, data: Union[str, bytes]) -> Union[str, bytes]:
        if isinstance(data, bytes):
            mask = self._mask.encode("ascii")
            return b"".join(bytes([b]) if b in (10, 13) else mask for b in data)
        return "".join(ch if ch in LINE_TERMINATORS else self._mask for ch in data)

    def write(self, data: Union[str, bytes]) -> int:
        if self._muted:
            data = self._masked(data)
        self._sink.write(data)
        self._sink.flush()
        return len(data)

    def write_raw(self, data: Union[str, bytes]) -> int:
        """Bypass the mask (prompt text, erase sequences)."""
        self._sink.write(data)
        self._sink.flush()
        return len(data)

    def flush(self) -> None:
        self._sink.flush()


def _is_posix_tty(stream: IO) -> bool:
    if os.name != "posix":
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def _read_tty(channel: MaskedWriter, stream: IO) -> str:
    import termios
    import tty

    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    chars = []
    try:
        # cbreak keeps ISIG, so Ctrl-C still raises KeyboardInterrupt
        tty.setcbreak(fd)
        attrs = termios.tcgetattr(fd)
        attrs[3] &= ~termios.ECHO
        termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
        while True:
            ch = stream.read(1)
            if ch == "" or ch in LINE_TERMINATORS:
                break
            if ch == _EOT and not chars:
                break
            if ch in _BACKSPACES:
                if chars:
                    chars.pop()
                    channel.write_raw("\b \b")
                continue
            chars.append(ch)
            channel.write(ch)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)
    return "".join(chars)


def read_masked_line(channel: MaskedWriter, stream: Optional[IO] = None) -> str:
    """Read one line from `stream`, echoing it through `channel`. No terminator in the result."""
    stream = stream if stream is not None else sys.stdin
    if _is_posix_tty(stream):
        return _read_tty(channel, stream)
    line = stream.readline()
    value = line.rstrip(LINE_TERMINATORS)
    channel.write(value)
    return value
