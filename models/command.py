from pydantic import BaseModel, Field
from typing import Any, List

class CommandRequest(BaseModel):
    sql: str
    params: List[Any] = Field(default_factory=list)

class ExecuteResult(BaseModel):
    lastInsertId: int
    rowsAffected: int
