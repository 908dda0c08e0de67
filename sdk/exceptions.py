"""Exception hierarchy for the Dakiya Telegram SDK.

Cancellation is never represented here: it always surfaces as
:class:`asyncio.CancelledError` so ``except Exception`` blocks never swallow it.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from sdk.models import ResponseParameters


class APIException(Exception):
    """The Telegram Bot API answered a request with an error.

    Attributes:
        status_code: HTTP status code returned by the API.
        response_body: Raw response body as a dict, when available.
        error_code: The API's ``error_code`` (falls back to *status_code*).
        description: Human-readable error description.
        parameters: Optional :class:`~sdk.models.ResponseParameters`
            (``retry_after`` for flood control, ``migrate_to_chat_id``).
    """

    def __init__(self, status_code: int, response_body: Optional[Dict[str, Any]] = None) -> None:
        """Initialise with the HTTP status code and optional body."""
        self.status_code = status_code
        self.response_body = response_body or {}
        self.error_code: int = self.response_body.get("error_code") or status_code
        self.description: str = self.response_body.get("description") or "Unknown error"
        self.parameters: Optional[ResponseParameters] = None
        raw_parameters = self.response_body.get("parameters")
        if isinstance(raw_parameters, dict):
            try:
                self.parameters = ResponseParameters.model_validate(raw_parameters)
            except ValidationError:
                self.parameters = None
        super().__init__(f"API error {self.error_code}: {self.description}")

    @property
    def retry_after(self) -> Optional[int]:
        """Seconds the server asked us to wait before retrying, if any."""
        return self.parameters.retry_after if self.parameters else None


class TransportException(Exception):
    """A request failed before producing a usable API answer.

    Raised for network errors, timeouts and malformed responses.  The
    underlying exception is chained as ``__cause__``.
    """


class UnknownVariantError(ValueError):
    """A polymorphic object carried a discriminator outside its closed set of variants.

    Attributes:
        discriminator: Name of the discriminator field (e.g. ``"type"``).
        tag: The offending value, or ``None`` when the field was missing.
    """

    def __init__(self, discriminator: str, tag: Optional[str], expected: Optional[str] = None) -> None:
        self.discriminator = discriminator
        self.tag = tag
        self.expected = expected
        if tag is None:
            message = f"Missing discriminator {discriminator!r}"
        else:
            message = f"Unknown variant {tag!r} for discriminator {discriminator!r}"
        if expected:
            message += f" (expected one of: {expected})"
        super().__init__(message)
