import math
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class CamelModel(BaseModel):
    """Base for wire models whose JSON keys are camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def clean_optional_text(value: Any) -> Any:
    """Collapse blank strings to None; strip everything else."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def build_pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def _int_or_default(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed or default


def clamp_pagination(page: Any, limit: Any) -> Tuple[int, int]:
    """Parse raw query values; unparseable or zero values take the defaults.

    Page is at least 1; limit stays within 1..MAX_PAGE_SIZE.
    """
    page = _int_or_default(page, 1)
    limit = _int_or_default(limit, DEFAULT_PAGE_SIZE)
    return max(page, 1), min(max(limit, 1), MAX_PAGE_SIZE)
