"""HTTP middleware: timeout, request ID, organization context.

Applied in main app; order matters (first added = outermost).
"""

from app.middleware.org_context import OrgContextMiddleware
from app.middleware.request_id import RequestIDMiddleware
from app.middleware.timeout import TimeoutMiddleware

__all__ = [
    "OrgContextMiddleware",
    "RequestIDMiddleware",
    "TimeoutMiddleware",
]
