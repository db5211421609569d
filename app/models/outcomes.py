"""
Backend call outcomes and request records
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class BackendConfig:
    """Where the backend lives and how long a call may take by default"""
    base_url: str
    default_timeout_ms: int


@dataclass(frozen=True)
class Success:
    status_code: int
    body: bytes

    kind = "success"
    ok = True


@dataclass(frozen=True)
class Timeout:
    timeout_ms: int

    kind = "timeout"
    ok = False

    @property
    def message(self) -> str:
        return f"timeout of {self.timeout_ms}ms exceeded"


@dataclass(frozen=True)
class TransportError:
    message: str

    kind = "transport_error"
    ok = False


@dataclass(frozen=True)
class BackendError:
    """A real response from the backend with a non-2xx status"""
    status_code: int
    body: bytes

    kind = "backend_error"
    ok = False

    @property
    def message(self) -> str:
        return f"Request failed with status code {self.status_code}"


BackendCallOutcome = Union[Success, Timeout, TransportError, BackendError]


@dataclass(frozen=True)
class RequestLogRecord:
    method: str
    path: str
    status_code: int
    duration_ms: float
    client_address: str
