from pydantic import BaseModel

from app.schemas.common.camel_model import CamelModel


class MessageOut(BaseModel):
    message: str


class ImageUploadOut(CamelModel):
    message: str
    image_url: str
