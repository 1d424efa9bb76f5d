"""
Redemption code normalisation and batch validation.

Codes are handled as digit strings: anything that is not a digit
(spaces, dashes, dots) is stripped before validation or storage.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List

CODE_LENGTH = 16

_NON_DIGITS = re.compile(r'\D')


class CodeImportError(Exception):
    """Raised when a batch of codes cannot be imported as a whole."""

    def __init__(self, message, invalid_codes=None):
        super().__init__(message)
        self.invalid_codes = list(invalid_codes or [])


@dataclass
class CodeValidation:
    valid_codes: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    system_duplicates: List[str] = field(default_factory=list)


def clean_code(code: str) -> str:
    return _NON_DIGITS.sub('', code or '')


def is_valid_code(code: str) -> bool:
    return len(clean_code(code)) == CODE_LENGTH


def format_code(code: str) -> str:
    """Group a 16-digit code as 1234-5678-9012-3456; other input is returned as is."""
    cleaned = clean_code(code)
    if len(cleaned) != CODE_LENGTH:
        return code
    return '-'.join(cleaned[i:i + 4] for i in range(0, CODE_LENGTH, 4))


def split_codes(raw) -> List[str]:
    """
    Accept either a block of text (one code per line) or an iterable of
    strings and return the non-blank entries, trimmed, in input order.
    """
    if isinstance(raw, str):
        raw = raw.splitlines()
    return [entry.strip() for entry in raw if entry and entry.strip()]


def validate_codes(new_codes: Iterable[str], existing_codes: Iterable[str]) -> CodeValidation:
    """
    Partition a batch of codes.

    Invalid entries are dropped. Walking the batch in order, a code seen
    earlier in the batch is a duplicate, a code already stored is a system
    duplicate, anything else is valid. Each list holds a code at most once.
    """
    existing = {clean_code(code) for code in existing_codes}
    seen = set()
    result = CodeValidation()

    for raw in new_codes:
        code = clean_code(raw)
        if len(code) != CODE_LENGTH:
            continue

        if code in seen:
            if code not in result.duplicates:
                result.duplicates.append(code)
        elif code in existing:
            if code not in result.system_duplicates:
                result.system_duplicates.append(code)
        else:
            seen.add(code)
            result.valid_codes.append(code)

    return result
