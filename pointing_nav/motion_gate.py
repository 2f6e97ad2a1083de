# motion gate - go/stop commands become the controller enable flag

import logging

from pointing_nav.command_channel import Command


class MotionGate:

    def __init__(self, sink, logger=None):
        self.sink = sink
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = False

    def apply(self, command):
        # returns True when the command was a go/stop and the flag was emitted
        if command is Command.GO:
            self.enabled = True
        elif command is Command.STOP:
            self.enabled = False
        else:
            return False

        self.sink.publish_enable(self.enabled)
        self.logger.info(f"Robot control {'enabled' if self.enabled else 'disabled'}")
        return True
