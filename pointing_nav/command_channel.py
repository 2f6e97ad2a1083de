# command channel - latest command tag from the interpreter

import logging
import threading
from enum import IntEnum


class Command(IntEnum):
    NONE = 0
    LOOK = 1
    GO = 2
    STOP = 3

    @classmethod
    def from_tag(cls, tag):
        # anything outside the known tags means "do nothing"
        try:
            return cls(int(tag))
        except (TypeError, ValueError):
            return cls.NONE


class CommandChannel:

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._command = Command.NONE

    def set(self, tag):
        command = Command.from_tag(tag)
        if command is Command.NONE and tag != Command.NONE:
            self.logger.debug(f"Ignoring unrecognized command tag {tag!r}")
        with self._lock:
            self._command = command
        return command

    def peek(self):
        with self._lock:
            return self._command

    def clear(self):
        with self._lock:
            self._command = Command.NONE
