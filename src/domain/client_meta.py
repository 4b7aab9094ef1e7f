from typing import Dict, Optional

from pydantic import BaseModel


class ClientMeta(BaseModel):
    """Diagnostic metadata attached to a request; advisory only."""

    device_id: Optional[str] = None
    client_address: Optional[str] = None
    client_agent: Optional[str] = None

    def present(self) -> Dict[str, str]:
        """Fields that carry a value, for merging onto an existing row."""
        return {k: v for k, v in self.model_dump().items() if v}
