import contextvars
from typing import Optional

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# request id of the request being served, read by the log formatter
request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)
