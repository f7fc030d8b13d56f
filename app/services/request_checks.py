"""Transport checks done before any payload work."""
import hmac

from ..errors import BadRequest, NotAcceptable, Unauthorized

JSON_CONTENT_TYPE = "application/json"

EMPTY_BODY_MESSAGE = "The POST body is empty; expected a JSON payload"


def check_secret(configured: str, provided: str | None) -> None:
    """Compare the configured shared secret with the X-Gitlab-Token header.

    An empty configured secret disables the check (open mode).

    Raises:
        Unauthorized: If a secret is configured and the header does not match
    """
    if not configured:
        return

    if provided is None or not hmac.compare_digest(configured.encode(), provided.encode()):
        raise Unauthorized("Missing or invalid X-Gitlab-Token header")


def check_content_type(content_type: str | None) -> None:
    """Require exactly 'application/json'.

    Raises:
        NotAcceptable: For any other value, including one with parameters
    """
    if content_type != JSON_CONTENT_TYPE:
        raise NotAcceptable("The request is not using Content-Type: application/json")


def check_body(body: bytes) -> None:
    """Require a non-empty body.

    Raises:
        BadRequest: If the body is empty
    """
    if not body:
        raise BadRequest(EMPTY_BODY_MESSAGE)
