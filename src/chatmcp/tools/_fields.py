"""Input field types that measure and coerce values the way JSON clients do.

Clients are JavaScript, so string lengths are counted in UTF-16 code units
and an integer is any number with no fractional part (``5.0`` included).
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator


def utf16_len(text: str) -> int:
    """Length of *text* in UTF-16 code units; astral characters count twice."""
    return len(text.encode("utf-16-le")) // 2


def bounded_text(min_length: int = 0, max_length: int | None = None) -> Any:
    """A ``str`` whose UTF-16 length lies in ``[min_length, max_length]``.

    Usage::

        EchoText = bounded_text(1, 10_000)

        class EchoInput(BaseModel):
            text: EchoText
    """

    def _check(value: str) -> str:
        length = utf16_len(value)
        if length < min_length:
            unit = "character" if min_length == 1 else "characters"
            msg = f"String should have at least {min_length} {unit}"
            raise ValueError(msg)
        if max_length is not None and length > max_length:
            msg = f"String should have at most {max_length} characters"
            raise ValueError(msg)
        return value

    return Annotated[str, AfterValidator(_check)]


def _integral(value: Any) -> Any:
    # bool is left alone so strict int validation still rejects it
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


Integer = Annotated[int, BeforeValidator(_integral)]
