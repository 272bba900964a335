from dataclasses import dataclass


@dataclass(frozen=True)
class LibraryError(Exception):
    """Client-facing failure. `message` is the only detail the caller sees."""

    status_code: int
    message: str

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"
