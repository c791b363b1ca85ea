"""
Proxy error types

UpstreamError is raised by the upstream clients; route handlers translate it
into a ProxyError carrying the status code and the message returned to the caller.
"""


class UpstreamError(Exception):
    """An upstream API call failed or returned an unusable payload"""


class ProxyError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
