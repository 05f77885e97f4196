from .command import CommandRequest, ExecuteResult
from .pdf import PdfPath, PdfSave, SavedPdf

__all__ = ['CommandRequest', 'ExecuteResult', 'PdfPath', 'PdfSave', 'SavedPdf']
