class ExceptionWithMessage(Exception):
    """A base class for all errors with a message"""

    @property
    def message(self) -> str:
        """
        Returns the message for the exception.

        :return str: The message string.
        """
        return self.args[0] if len(self.args) > 0 else "<no message>"


class InfrastructureError(ExceptionWithMessage):
    """Raised when something the service needs to run is unavailable.

    These are surfaced to the requesting client as an error page made of a
    short context string and the text of the underlying cause.
    """

    def __init__(self, context: str, cause: BaseException | str):
        super().__init__(context)
        self.context = context
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.context}: {self.cause}"


class ConfigDirectoryError(InfrastructureError):
    """Raised when the configuration directory cannot be created."""

    pass


class WatchSetupError(InfrastructureError):
    """Raised when a filesystem watch cannot be attached to a directory."""

    pass


class WatchClosedError(ExceptionWithMessage):
    """Raised when reading from a watcher that has stopped."""

    pass
