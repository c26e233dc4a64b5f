"""Decoding of exec output into a Response envelope."""

from pydantic import ValidationError

from kube_exec.errors import DecodeError, DecodeFailure
from kube_exec.logging_utils import get_logger
from kube_exec.models import Response

logger = get_logger("decoder")


def parse_envelope(raw: bytes) -> Response:
    """Parse exec output that is itself a JSON Response envelope.

    Raises:
        DecodeError: If the output is not a valid envelope. The message
            carries the raw output text.
    """
    try:
        return Response.model_validate_json(raw)
    except ValidationError as e:
        text = raw.decode("utf-8", errors="replace")
        raise DecodeError(
            DecodeFailure.MALFORMED_ENVELOPE,
            f"unmarshal json {text} got error: {e}",
            {"size": len(raw)},
        ) from e


def decode(raw: bytes, *, raw_output: bool = False) -> Response:
    """Turn exec output into the Response returned to the caller.

    With ``raw_output`` the text is passed through as a success result.
    Otherwise the output must be an envelope; anything else becomes a
    failure Response describing the decode error.
    """
    if raw_output:
        return Response(code=0, success=True, result=raw.decode("utf-8", errors="replace"))

    try:
        return parse_envelope(raw)
    except DecodeError as e:
        logger.warning(e.message)
        return Response.failure(e.message)
