"""Error taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations


class ScholarDeskError(Exception):
    """Base error carrying an HTTP status and a message safe to show users.

    ``str(exc)`` may hold diagnostic detail for the logs. ``public_message``
    is what the client sees; subclasses with ``expose_detail`` set show the
    detail itself.
    """

    status_code: int = 500
    public_message: str = "Unexpected error"
    expose_detail: bool = False

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.public_message)
        if detail and self.expose_detail:
            self.public_message = detail


class UpstreamUnavailable(ScholarDeskError):
    """The generation service could not be reached or answered with an error."""

    status_code = 500
    public_message = "AI service is unavailable, please try again"


class InvalidAIResponse(ScholarDeskError):
    """The generation service answered, but not with usable JSON."""

    status_code = 500
    public_message = "AI returned invalid JSON"

    def __init__(self, detail: str | None = None, raw_text: str = "") -> None:
        super().__init__(detail)
        self.raw_text = raw_text


class ValidationError(ScholarDeskError):
    """Required input is missing; raised before any network call."""

    status_code = 400
    public_message = "Invalid request"
    expose_detail = True


class NotFound(ScholarDeskError):
    status_code = 404
    public_message = "Not found"
    expose_detail = True
