from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from models.pdf import PdfPath, PdfSave, SavedPdf
from utils.pdf_store import PathOutsideStoreError, PdfStore

router = APIRouter()

def get_pdf_store(request: Request) -> PdfStore:
    return request.app.state.pdf_store

@router.post("/read")
def read_pdf_file(payload: PdfPath, store: PdfStore = Depends(get_pdf_store)):
    """Return the stored file as raw application/pdf bytes, not the JSON byte array save takes."""
    try:
        data = store.read(payload.file_path)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (PathOutsideStoreError, OSError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Response(content=data, media_type="application/pdf")

@router.post("/save", response_model=SavedPdf)
def save_pdf_file(payload: PdfSave, store: PdfStore = Depends(get_pdf_store)):
    """Write fileData, a JSON array of 0-255 ints, into the store; read hands back raw bytes."""
    try:
        data = bytes(payload.file_data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="fileData must hold byte values 0-255") from exc
    try:
        path = store.save(payload.file_name, data)
    except (PathOutsideStoreError, OSError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"path": path}

@router.post("/delete")
def delete_pdf_file(payload: PdfPath, store: PdfStore = Depends(get_pdf_store)):
    try:
        store.delete(payload.file_path)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (PathOutsideStoreError, OSError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True}
