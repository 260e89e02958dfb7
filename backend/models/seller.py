from pydantic import BaseModel, Field
from typing import Optional


class ShopDetails(BaseModel):
    shopName: str = Field(..., min_length=1)
    shopType: str = Field(..., min_length=1)
    shopLocation: Optional[str] = None
    shopPhoto: Optional[str] = None    # Cloudinary URL
