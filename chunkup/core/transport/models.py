"""Transport data models."""
from dataclasses import dataclass, field
from typing import Any, Dict
import json


@dataclass(frozen=True)
class TransportResponse:
    """
    Terminal outcome of one HTTP request.

    Attributes:
        status: HTTP status code
        body: Raw response body
        headers: Response headers
    """
    status: int
    body: bytes = b''
    headers: Dict[str, str] = field(default_factory=dict)

    def text(self, encoding: str = 'utf-8') -> str:
        """Returns the body decoded as text."""
        return self.body.decode(encoding, errors='replace')

    def json(self) -> Any:
        """
        Returns the body parsed as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.body.decode('utf-8'))
