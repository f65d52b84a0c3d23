"""Full-URL formatting for issued codes."""

__all__ = ["DEFAULT_BASE_PATH", "build_full_url"]

DEFAULT_BASE_PATH = "https://yourdomain.com/QR/"


def build_full_url(code: str, base_path: str = DEFAULT_BASE_PATH) -> str:
    # Plain concatenation: no separator is inserted and nothing is encoded.
    return f"{base_path}{code}"
