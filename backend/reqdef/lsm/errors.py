from typing import Optional


class LSMError(Exception):
    """Base class for failures talking to the LSM server."""


class LSMServerError(LSMError):
    def __init__(self, operation: str, status_code: int, body: Optional[str] = None):
        super().__init__(f"{operation}: server returned non-OK code {status_code}")
        self.operation = operation
        self.status_code = status_code
        self.body = body


class SecurityQueryError(LSMError):
    pass
