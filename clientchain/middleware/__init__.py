"""HTTP middleware: request / correlation IDs.

Applied in main app; order matters (last added = outermost).
"""

from clientchain.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
