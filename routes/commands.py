from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from db.database import CommandError, Database, get_db
from models.command import CommandRequest, ExecuteResult

router = APIRouter()

# Plain def: FastAPI runs these on its thread pool and Database.lock
# serializes them.

@router.post("/execute", response_model=ExecuteResult)
def db_execute(payload: CommandRequest, db: Database = Depends(get_db)):
    """Run an INSERT/UPDATE/DELETE/DDL statement."""
    try:
        return db.execute(payload.sql, payload.params)
    except CommandError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

@router.post("/select")
def db_select(payload: CommandRequest, db: Database = Depends(get_db)) -> List[Dict[str, Any]]:
    """Run a query and return its rows as column-name mappings."""
    try:
        return db.select(payload.sql, payload.params)
    except CommandError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
