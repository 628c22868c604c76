from fastapi import APIRouter, Query, status
from typing import Optional

from tourbook.models import TourPackage
from tourbook.schemas import TourPackageCreate, TourPackageOut, TourPackageUpdate
from tourbook.services import package_service

router = APIRouter(prefix="/api/packages", tags=["packages"])


def _package_out(package: TourPackage) -> TourPackageOut:
    data = package.model_dump(exclude={"id", "revision_id"})
    return TourPackageOut(id=str(package.id), **data)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_package(payload: TourPackageCreate):
    package = await package_service.create_package(payload)
    return {
        "success": True,
        "message": "Package created successfully",
        "data": _package_out(package),
    }


@router.get("")
async def list_packages(country: Optional[str] = Query(None)):
    packages = await package_service.list_packages(country)
    return {
        "success": True,
        "count": len(packages),
        "data": [_package_out(p) for p in packages],
    }


@router.get("/{package_id}")
async def get_package(package_id: str):
    package = await package_service.get_package(package_id)
    return {"success": True, "data": _package_out(package)}


@router.put("/{package_id}")
async def update_package(package_id: str, payload: TourPackageUpdate):
    package = await package_service.update_package(package_id, payload)
    return {
        "success": True,
        "message": "Package updated successfully",
        "data": _package_out(package),
    }


@router.delete("/{package_id}")
async def delete_package(package_id: str):
    await package_service.delete_package(package_id)
    return {"success": True, "message": "Package deleted successfully"}
