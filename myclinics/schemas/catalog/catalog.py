# myclinics/schemas/catalog/catalog.py
from pydantic import BaseModel


class SpecialtyOut(BaseModel):
    id: str
    name: str
    nameAr: str
    slug: str
    icon: str
