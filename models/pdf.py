from pydantic import BaseModel, Field
from typing import List

class PdfPath(BaseModel):
    file_path: str = Field(..., alias="filePath")

    class Config:
        populate_by_name = True

class PdfSave(BaseModel):
    file_name: str = Field(..., alias="fileName")
    # Byte values as sent by the UI (a JSON array of 0-255 integers)
    file_data: List[int] = Field(..., alias="fileData")

    class Config:
        populate_by_name = True

class SavedPdf(BaseModel):
    path: str
