from __future__ import annotations

import re

# ASCII only: `\d` would also accept other Unicode decimal digits.
_CEP_PATTERN = re.compile(r"[0-9]{8}")


def is_valid_cep(value: str) -> bool:
    """Return True when `value` is exactly eight decimal digits."""

    if not isinstance(value, str):
        return False
    return _CEP_PATTERN.fullmatch(value) is not None
