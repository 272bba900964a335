from functools import lru_cache
from pathlib import Path

TEMPLATE_PATH = Path(__file__).parent / "templates" / "library.html"


@lru_cache
def load_library_html() -> str:
    """The Digital Book Library viewer, served as-is to authenticated extensions."""
    return TEMPLATE_PATH.read_text(encoding="utf-8")
