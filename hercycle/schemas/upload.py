from pydantic import BaseModel, ConfigDict, Field


class UploadedFile(BaseModel):
    """Shape of the license upload response."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "File uploaded successfully"
    url: str
    filename: str
    original_name: str = Field(serialization_alias="originalName")
    size: int
    mimetype: str
