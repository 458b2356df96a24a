class DuelError(Exception):
    """Base class for recoverable game errors.

    The message is safe to send back to the originating connection. When
    ``notify`` is false the socket layer only logs the failure.
    """

    message = 'Request failed'
    notify = True

    def __init__(self, message=None, notify=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        if notify is not None:
            self.notify = notify


class NotFound(DuelError):
    message = 'Game not found'


class Full(DuelError):
    message = 'Game full'


class PreconditionFailed(DuelError):
    message = 'Action not allowed right now'
    notify = False
