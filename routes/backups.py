import io
import sqlite3
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from db.database import CommandError, Database, create_backup_archive_bytes, get_db, record_export

router = APIRouter()

@router.get("/backup")
def download_backup(request: Request, db: Database = Depends(get_db)):
    """Zip the database and attachments and log the export."""
    pdf_store = request.app.state.pdf_store
    try:
        data, count = create_backup_archive_bytes(db, pdf_store.directory)
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        filename = f"recallify-backup-{timestamp}.zip"
        record_export(db, "backup", filename, None, count)
    except (CommandError, sqlite3.Error, OSError) as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    headers = {"Content-Disposition": f"attachment; filename={filename}"}
    return StreamingResponse(io.BytesIO(data), media_type="application/zip", headers=headers)
