from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

from .config import MAX_PRIORITY


class JobSubmit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_name: str = Field(alias="class", min_length=1)
    method: str = Field(min_length=1)
    parameters: List[Any] = Field(default_factory=list)
    delay: int = Field(default=0, ge=0)
    priority: int = Field(default=0, ge=-MAX_PRIORITY, le=MAX_PRIORITY)


class DispatchResponse(BaseModel):
    status: str
    job: str


class JobResponse(BaseModel):
    job_id: str
    job_type: str
    status: str
    priority: int = 0
    payload: Dict[str, Any]
    result: Optional[Any] = None
    error: Optional[str] = None


class JobListResponse(BaseModel):
    jobs: list[JobResponse]
