from __future__ import annotations

import re

_CODE_SEPARATORS_PATTERN = re.compile(r"[\s\-]+")


def normalize_redemption_code(raw_code: str) -> str:
    return _CODE_SEPARATORS_PATTERN.sub("", raw_code).upper()
