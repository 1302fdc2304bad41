from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")


def _digits(value: object) -> str:
    """
    Raw digits after US country-code normalization.
    An 11-digit number with a leading "1" loses the "1"; nothing else is dropped.
    """
    digits = _NON_DIGITS.sub("", str(value or ""))
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return digits


def format_phone_number(value: str | None) -> str:
    """
    Format phone input progressively as (XXX) XXX-XXXX.

    Runs on every keystroke of inline editing, so it must be idempotent and
    must never raise:

        >>> format_phone_number("5551234567")
        '(555) 123-4567'
        >>> format_phone_number("+1 555 123 4567")
        '(555) 123-4567'
        >>> format_phone_number("5551")
        '(555) 1'
        >>> format_phone_number("abc")
        ''
    """
    digits = _digits(value)[:10]
    if not digits:
        return ""
    if len(digits) <= 3:
        return f"({digits}"
    if len(digits) <= 6:
        return f"({digits[:3]}) {digits[3:]}"
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def strip_phone_number(value: str | None) -> str:
    """Strip formatting back to canonical raw digits."""
    return _digits(value)


def is_valid_phone_number(value: str | None) -> bool:
    """True iff the input carries exactly 10 digits."""
    return len(strip_phone_number(value)) == 10


def render_markdown(md: str | None) -> str:
    import markdown

    return markdown.markdown(
        md or "",
        extensions=["extra", "sane_lists"],
        output_format="html5",
    )
