from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from .errors import MissingCredentialError

API_KEY_ENV = "COMMITTY_OPENAI_API_KEY"
MODEL_ENV = "COMMITTY_MODEL"
DEFAULT_MODEL = "gpt-5"

DEFAULT_MAX_INPUT_CHARS = 48000
# Budget used for the one stat-mode retry after a size/rate rejection.
RETRY_MAX_INPUT_CHARS = 20000

# Noisy paths that rarely say anything useful about a change.
DEFAULT_EXCLUDES = [
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "*.lock",
    "node_modules/**",
    "dist/**",
    "build/**",
    "out/**",
    "coverage/**",
    "*.min.*",
    "*.map",
    "*.snap",
    ".env*",
]


@dataclass(frozen=True)
class Config:
    api_key: str
    model: str = DEFAULT_MODEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str], model: Optional[str] = None) -> "Config":
        """Build the run configuration; an explicit model wins over the environment."""
        api_key = environ.get(API_KEY_ENV, "").strip()
        if not api_key:
            raise MissingCredentialError(f"Missing {API_KEY_ENV}. Please set it as an environment variable.")
        resolved = model or environ.get(MODEL_ENV, "").strip() or DEFAULT_MODEL
        return cls(api_key=api_key, model=resolved)


def build_excludes(extra: Optional[Iterable[str]] = None, use_defaults: bool = True) -> List[str]:
    excludes = list(DEFAULT_EXCLUDES) if use_defaults else []
    excludes.extend(p for p in (extra or []) if p)
    return excludes
