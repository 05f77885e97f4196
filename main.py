import argparse
import logging
import sqlite3
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db import database
from db.database import clear_pomodoro_history, open_database, run_daily_backup
from config import load_config
from routes import commands, pdfs, backups  # Import routers
from utils.pdf_store import PdfStore

logger = logging.getLogger(__name__)

app = FastAPI(title="Recallify", description="Local store for the Recallify study tracker")

# Include routers
app.include_router(commands.router, prefix="/db", tags=["db"])
app.include_router(pdfs.router, prefix="/pdfs", tags=["pdfs"])
app.include_router(backups.router, prefix="/admin", tags=["admin"])

def configure_logging(config: dict) -> None:
    logging.basicConfig(
        level=config["logging"]["level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def open_store(config: dict) -> database.Database:
    """Open the database under the data dir; raises if the schema cannot be initialized."""
    db_path = database.DATA_DIR / config["database"]["filename"]
    return open_database(db_path, strict_params=config["database"]["strict_params"])

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: any failure opening the store aborts startup
    config = load_config()
    configure_logging(config)
    db = open_store(config)
    storage = config["storage"]
    pdf_store = PdfStore(database.DATA_DIR / storage["pdf_dir"])
    app.state.db = db
    app.state.pdf_store = pdf_store
    try:
        run_daily_backup(
            db,
            backup_dir=database.DATA_DIR / storage["backup_dir"],
            pdf_dir=pdf_store.directory,
            keep=storage["backup_keep"],
        )
    except (OSError, sqlite3.Error, database.CommandError):
        logger.exception("daily backup failed")
    yield
    db.close()

app.router.lifespan_context = lifespan  # For auto init on start

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Recallify local store")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--clear-pomodoro-history", action="store_true", help="Delete pomodoro sessions and reset the timer")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    configure_logging(config)
    if args.init or args.clear_pomodoro_history:
        db = open_store(config)
        if args.clear_pomodoro_history:
            removed = clear_pomodoro_history(db)
            print(f"Deleted {removed} pomodoro sessions and reset the timer")
        db.close()
        print(f"DB initialized in {database.DATA_DIR}")
        exit(0)
    # Run server
    server = config["server"]
    uvicorn.run("main:app", host=server["host"], port=server["port"], reload=args.dev, log_level="info")
