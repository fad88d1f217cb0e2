from pydantic import BaseModel


class HypothesisException(Exception):
    """
    Base class for exceptions in this module.
    """
    pass


class ErrorBody(BaseModel):
    """Error body returned by the Hypothesis API.

    Attributes:
        status: API returned status, usually ``"failure"``.
        reason: Cause of the failure.
    """
    status: str
    reason: str


class APIError(HypothesisException):
    """
    Exception raised when the API answers with an error body.
    For instance, when fetching an annotation with a non-existing id.
    """

    def __init__(self,
                 error: ErrorBody,
                 raw_text: str = '',
                 status_code: int | None = None):
        """ Constructor.

        Args:
            error (ErrorBody): The parsed error body. Empty fields if the body could not be parsed.
            raw_text (str): The raw response text.
            status_code (int): The HTTP status code, if known.
        """
        super().__init__()
        self.error = error
        self.raw_text = raw_text
        self.status_code = status_code

    @property
    def status(self) -> str:
        return self.error.status

    @property
    def reason(self) -> str:
        return self.error.reason

    def __str__(self):
        msg = f"Status: {self.status}\nReason: {self.reason}"
        if not self.status and not self.reason and self.raw_text:
            msg += f"\nResponse: {self.raw_text}"
        return msg


class TransportError(HypothesisException):
    """
    Exception raised when the request could not be sent or the response could not be read
    (network, TLS, timeout).
    """
    pass


class HeaderError(HypothesisException):
    """
    Exception raised when a header value cannot be built, e.g. the developer key contains invalid characters.
    """
    pass


class HypothesisEnvironmentError(HypothesisException):
    """
    Exception raised when a required environment variable is not set.
    """

    def __init__(self, variable: str, suggestion: str):
        super().__init__(suggestion)
        self.variable = variable
        self.suggestion = suggestion

    def __str__(self):
        return f"{self.variable} is not set. {self.suggestion}"


class SerializationError(HypothesisException):
    """
    Exception raised when a request payload could not be encoded.
    """

    def __init__(self, msg: str, raw_text: str = ''):
        super().__init__(msg)
        self.raw_text = raw_text


class URLError(HypothesisException):
    """
    Exception raised when the computed request URL is malformed.
    """
    pass
