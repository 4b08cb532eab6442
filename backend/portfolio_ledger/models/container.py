"""Container and identity models."""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Container(BaseModel):
    """An investment container (portfolio) and its unit of account."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Container identifier")
    name: str = Field(..., description="Display name")
    currency: str = Field(..., description="Unit-of-account code, e.g. VND")


class Identity(BaseModel):
    """Active identity as exposed by the session provider."""
    model_config = ConfigDict(frozen=True)

    account_id: str
    containers: Optional[List[Container]] = Field(None, description="Accessible containers, None while unresolved")
    loading: bool = Field(default=False, description="True while the session is still resolving")

    @property
    def ready(self) -> bool:
        return not self.loading and self.containers is not None
