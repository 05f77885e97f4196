# Routes package __init__.py - re-exports routers for main.py convenience
from .commands import router as commands_router
from .pdfs import router as pdfs_router
from .backups import router as backups_router

__all__ = ['commands_router', 'pdfs_router', 'backups_router']
