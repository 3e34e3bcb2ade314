# frontend/config.py
# Where the asset ledger UI finds its backend

import os

_ENVIRONMENTS = ("local", "staging", "production")

# Unknown values are treated as production so a typo never relaxes URL checks
_raw_env = os.environ.get("ENV", "local").strip().lower()
ENV = _raw_env if _raw_env in _ENVIRONMENTS else "production"
IS_LOCAL = ENV == "local"

LOCAL_API_URL = "http://127.0.0.1:8000"

# Request timeout for API calls (seconds)
REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "20"))


def validate_api_url(url: str, env: str) -> None:
    """Deployed environments must reach the ledger API over HTTPS on a real host."""
    if not url:
        raise ValueError("API base URL cannot be empty")
    if env == "local":
        return
    if not url.startswith("https://"):
        raise ValueError(f"{env} requires an https:// ledger API URL. Got: {url}")
    if "127.0.0.1" in url or "localhost" in url:
        raise ValueError(f"{env} cannot point at a localhost ledger API. Got: {url}")


def get_api_base_url() -> str:
    """BACKEND_URL, then API_BASE_URL; the local default only when ENV is local."""
    for var in ("BACKEND_URL", "API_BASE_URL"):
        configured = os.environ.get(var, "").strip().rstrip("/")
        if configured:
            validate_api_url(configured, ENV)
            return configured

    if IS_LOCAL:
        return LOCAL_API_URL

    raise RuntimeError(f"No ledger API URL configured for {ENV}. Set BACKEND_URL.")


print(f"[CONFIG] Environment: {ENV}")
