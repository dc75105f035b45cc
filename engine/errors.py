"""Exception taxonomy for the File Session Engine."""


class FileSessionError(Exception):
    """
    Base exception class for all engine errors.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(FileSessionError):
    """
    Raised when the request never produced an HTTP response
    (connection refused, DNS failure, timeout).
    """
    pass


class ServerError(FileSessionError):
    """
    Raised when the server answered with a non-2xx status.
    """

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(FileSessionError):
    """
    Raised when a 2xx body does not parse into the expected shape.
    """
    pass


class PreconditionError(FileSessionError):
    """
    Raised when an operation is attempted without what it requires,
    usually a resolved identity.
    """
    pass


class InvalidFilterError(FileSessionError, ValueError):
    """
    Raised when a size bound in a filter input is not a number.
    """
    pass
