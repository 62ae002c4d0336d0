"""Free-text normalisation shared by indexing and querying."""

import re
from typing import List, Optional

# Anything that is neither a word character nor a CJK ideograph becomes a
# separator.  Python's \w is Unicode-aware, so accented Latin letters stay
# inside their word.
_SEPARATOR_RE = re.compile(r"[^\w\u4e00-\u9fff]+")

MIN_TERM_LENGTH = 2


def tokenize(text: Optional[str]) -> List[str]:
    """Lower-case *text* and split it into terms of two or more characters."""
    if not text:
        return []
    cleaned = _SEPARATOR_RE.sub(" ", text.lower())
    return [term for term in cleaned.split() if len(term) >= MIN_TERM_LENGTH]
