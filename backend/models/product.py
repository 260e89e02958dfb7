from pydantic import BaseModel, Field
from typing import Optional


class ProductFields(BaseModel):
    """
    Superset of the attributes of every category we sell. Fields that do
    not apply to a category (storage/ram outside mobiles) stay None.
    """

    brand: Optional[str] = None
    model: Optional[str] = None
    productType: Optional[str] = None
    color: Optional[str] = None
    storage: Optional[str] = None
    ram: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    image: Optional[str] = None    # Cloudinary URL
