import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger("propsnap")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def json_dumps(data: Any, indent: Optional[int] = None) -> str:
    """JSON encoding used for every persisted payload; unknown types fall back to str()."""
    return json.dumps(data, indent=indent, default=str, ensure_ascii=False)
