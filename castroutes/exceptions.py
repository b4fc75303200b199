class CastRoutesException(Exception):
    """Base exception for castroutes."""
    status_code = 500  # Default status code
    message: str

    def __init__(self, message: str | None = None, *args):
        super().__init__(message, *args)
        if message is not None:
            self.message = message
        elif args and args[0]:
            self.message = str(args[0])
        else:
            self.message = self.__class__.__name__

    def __str__(self) -> str:
        return self.message


class RoutingError(CastRoutesException):
    """Raised for misuse of the route table. These are programmer errors."""


class ConfigurationError(RoutingError):
    """Raised when the route table is declared incorrectly.

    Duplicate aliases, malformed patterns and registration on a frozen table
    all end up here, at startup rather than on a request.
    """


class UnknownAlias(RoutingError):
    """Raised by ``url_for`` when no route was registered under the alias."""

    def __init__(self, alias: str):
        super().__init__(f"No route is registered with the alias '{alias}'")
        self.alias = alias


class MissingParameter(RoutingError):
    """Raised by ``url_for`` when a named segment has no value."""

    def __init__(self, parameter: str, pattern: str, alias: str | None = None):
        if alias:
            message = f"Missing required path parameter '{parameter}' for '{alias}' ({pattern})"
        else:
            message = f"Missing required path parameter '{parameter}' for {pattern}"
        super().__init__(message)
        self.parameter = parameter
        self.pattern = pattern
        self.alias = alias


class HTTPNotFoundException(CastRoutesException):
    """Raised when a route is not found (404)."""
    status_code = 404


class HTTPMethodNotAllowedException(CastRoutesException):
    """Raised when a route is found but the method is not allowed (405)."""
    status_code = 405

    def __init__(self, message: str, allowed_methods: list[str]):
        super().__init__(message)
        self.allowed_methods = allowed_methods


class HTTPNotImplementedException(CastRoutesException):
    """Raised when a route resolves to a handler with no controller behind it (501)."""
    status_code = 501
