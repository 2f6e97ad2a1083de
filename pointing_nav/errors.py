# error kinds raised by collaborators and validation gates


class PointingNavError(Exception):
    pass


class CollaboratorUnavailable(PointingNavError):
    # service could not be reached or reported failure

    def __init__(self, service, reason=''):
        self.service = service
        self.reason = reason
        message = f"{service} unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CollaboratorTimeout(CollaboratorUnavailable):

    def __init__(self, service, timeout):
        self.timeout = timeout
        super().__init__(service, f"no response within {timeout:.1f}s")


class InvalidResult(PointingNavError):
    # collaborator answered, but the answer failed a validation gate

    def __init__(self, stage, detail):
        self.stage = stage
        self.detail = detail
        super().__init__(f"invalid {stage}: {detail}")
