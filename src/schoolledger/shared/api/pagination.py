from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, TypeVar

from schoolledger.shared.exceptions import ValidationError
from schoolledger.shared.validation import ValidationService

T = TypeVar("T")

_validator = ValidationService()


def paginate(items: Sequence[T], page: Optional[int], limit: Optional[int]) -> Dict[str, Any]:
    """
    Slice ``items`` when ``page`` or ``limit`` is given (missing one takes the
    validator default); with neither, the whole list is one page.
    """
    if page is None and limit is None:
        return {"items": list(items), "total": len(items), "page": 1, "limit": len(items)}

    result = _validator.validate_pagination({"page": page, "limit": limit})
    if not result.valid:
        raise ValidationError("Invalid pagination", details={"errors": result.errors})

    page_no, size = result.sanitized["page"], result.sanitized["limit"]
    start = (page_no - 1) * size
    return {"items": list(items[start:start + size]), "total": len(items), "page": page_no, "limit": size}
