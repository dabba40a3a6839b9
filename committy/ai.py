from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from .config import RETRY_MAX_INPUT_CHARS
from .errors import SizeOrRateError, SummaryRequestError
from .prepare import InputMode, InputPreparer, PreparedPayload

logger = logging.getLogger(__name__)


# -----------------------------
# Prompt
# -----------------------------

INSTRUCTION = (
    "Return ONLY a single-line Conventional Commit message (e.g. feat: ..., fix: ...). "
    "Input may be a DIFF, a minimal diff (U0), a STAT summary or just FILENAMES."
)


def build_prompt(payload: PreparedPayload) -> str:
    return f"{INSTRUCTION}\n\n{payload.render()}"


# -----------------------------
# OpenAI integration
# -----------------------------

class AIClient:
    def __init__(self, api_key: str, model: str, client: Any = None):
        if client is None:
            from openai import OpenAI

            # Retries are decided by generate_with_retry, not the SDK.
            client = OpenAI(api_key=api_key, max_retries=0)
        self._client = client
        self.model = model

    def generate_commit_message(self, payload: PreparedPayload) -> str:
        """Send one chat completion request and return the first choice, trimmed."""
        import openai

        logger.debug("requesting summary from %s with %d-char %s payload", self.model, len(payload.text), payload.kind.value)
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_prompt(payload)}],
            )
        except openai.OpenAIError as e:
            raise SummaryRequestError(
                str(e),
                status_code=getattr(e, "status_code", None),
                code=getattr(e, "code", None),
            ) from e

        if not resp.choices:
            raise SummaryRequestError("The model returned no choices.")
        return (resp.choices[0].message.content or "").strip()


# -----------------------------
# Size/rate retry
# -----------------------------

SIZE_OR_RATE_PATTERN = re.compile(r"tokens per min|TPM|requested \d+", re.IGNORECASE)
SIZE_OR_RATE_CODES = frozenset(
    {"rate_limit_exceeded", "context_length_exceeded", "tokens", "request_too_large"}
)


def classify_request_error(err: SummaryRequestError) -> SummaryRequestError:
    """Return a SizeOrRateError when the failure looks retryable with less input.

    Structured status/code wins; the message text is only consulted when the
    client gave us nothing structured that matched.
    """
    if isinstance(err, SizeOrRateError):
        return err
    if err.status_code == 413 or (err.code or "") in SIZE_OR_RATE_CODES:
        return SizeOrRateError.from_error(err)
    if SIZE_OR_RATE_PATTERN.search(err.message or ""):
        return SizeOrRateError.from_error(err)
    return err


def generate_with_retry(
    requester: AIClient,
    preparer: InputPreparer,
    payload: PreparedPayload,
    max_chars: int,
    notify: Optional[Callable[[str], None]] = None,
) -> str:
    """Request a message; on a size/rate rejection retry once with a stat summary."""
    try:
        return requester.generate_commit_message(payload)
    except SummaryRequestError as e:
        classified = classify_request_error(e)
        if not isinstance(classified, SizeOrRateError):
            raise
        logger.debug("size/rate rejection (status=%s, code=%s): %s", e.status_code, e.code, e.message)

    if notify is not None:
        notify("API rate-limited due to input size. Retrying with summary (stat) ...")
    fallback = preparer.prepare(InputMode.STAT, min(max_chars, RETRY_MAX_INPUT_CHARS))
    return requester.generate_commit_message(fallback)
