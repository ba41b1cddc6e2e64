from typing import List

from fastapi import APIRouter, Depends, Query

from ..application.services.catalog_service import CatalogService, SPECIALTIES_PAGE_SIZE, TOP_RATED_PAGE_SIZE
from ..dependencies import get_catalog_service
from ..schemas import Envelope, PaginatedEnvelope, Pagination, SpecialtyOut, DoctorOut

router = APIRouter(prefix="/public", tags=["Public"])


@router.get("/specialties", response_model=PaginatedEnvelope[SpecialtyOut])
def list_specialties(
    page: int = Query(0, ge=0),
    limit: int = Query(SPECIALTIES_PAGE_SIZE, ge=1, le=50),
    catalog: CatalogService = Depends(get_catalog_service),
):
    items, pagination = catalog.specialties(page, limit)
    return PaginatedEnvelope(data=[SpecialtyOut(**s) for s in items], pagination=Pagination(**pagination))


@router.get("/doctors/top-rated", response_model=PaginatedEnvelope[DoctorOut])
def top_rated_doctors(
    page: int = Query(0, ge=0),
    limit: int = Query(TOP_RATED_PAGE_SIZE, ge=1, le=50),
    catalog: CatalogService = Depends(get_catalog_service),
):
    doctors, pagination = catalog.top_rated(page, limit)
    return PaginatedEnvelope(data=[DoctorOut.from_dto(d) for d in doctors], pagination=Pagination(**pagination))


@router.get("/doctors", response_model=Envelope[List[DoctorOut]])
def all_doctors(catalog: CatalogService = Depends(get_catalog_service)):
    return Envelope(data=[DoctorOut.from_dto(d) for d in catalog.all_doctors()])


@router.get("/cities", response_model=Envelope[List[str]])
def list_cities(catalog: CatalogService = Depends(get_catalog_service)):
    return Envelope(data=catalog.cities())
