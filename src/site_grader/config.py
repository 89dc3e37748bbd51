"""Runtime settings for site-grader."""

import os
from dataclasses import dataclass, replace


DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SiteGrader/0.1; +https://github.com/site-grader/site-grader)"


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Timeouts and limits used by probes and the page fetcher."""
    fetch_timeout: float = 15.0
    text_probe_timeout: float = 5.0
    image_head_timeout: float = 5.0
    image_get_timeout: float = 8.0
    dns_lifetime: float = 4.0
    max_image_bytes: int = 1024 * 1024
    user_agent: str = DEFAULT_USER_AGENT
    parallel: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        """Read overrides from SITE_GRADER_* environment variables."""
        defaults = cls()
        return cls(
            fetch_timeout=_env_float("SITE_GRADER_FETCH_TIMEOUT", defaults.fetch_timeout),
            text_probe_timeout=_env_float("SITE_GRADER_PROBE_TIMEOUT", defaults.text_probe_timeout),
            image_head_timeout=_env_float("SITE_GRADER_IMAGE_HEAD_TIMEOUT", defaults.image_head_timeout),
            image_get_timeout=_env_float("SITE_GRADER_IMAGE_TIMEOUT", defaults.image_get_timeout),
            dns_lifetime=_env_float("SITE_GRADER_DNS_LIFETIME", defaults.dns_lifetime),
            max_image_bytes=int(_env_float("SITE_GRADER_MAX_IMAGE_BYTES", defaults.max_image_bytes)),
            user_agent=os.getenv("SITE_GRADER_USER_AGENT") or defaults.user_agent,
            parallel=_env_bool("SITE_GRADER_PARALLEL", defaults.parallel),
        )

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
