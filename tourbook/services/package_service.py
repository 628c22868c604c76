from datetime import datetime, timezone
from typing import List

from beanie import PydanticObjectId as OID
from bson.errors import InvalidId
from pydantic import ValidationError

from tourbook.errors import InvalidData, NotFound
from tourbook.models import TourPackage
from tourbook.schemas import TourPackageCreate, TourPackageUpdate
from tourbook.utils.logger import get_logger

logger = get_logger("packages")


async def create_package(payload: TourPackageCreate) -> TourPackage:
    package = TourPackage(**payload.model_dump())
    await package.insert()
    logger.info(f"Package created: {package.id} ({package.name})")
    return package


async def get_package(package_id: str) -> TourPackage:
    try:
        package = await TourPackage.get(OID(package_id))
    except InvalidId:
        package = None
    if not package:
        raise NotFound("Package not found")
    return package


async def list_packages(country: str | None = None) -> List[TourPackage]:
    query = TourPackage.find(TourPackage.country == country) if country else TourPackage.find_all()
    return await query.sort(-TourPackage.created_at).to_list()


def _field_errors(exc: ValidationError) -> list:
    return [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]


async def update_package(package_id: str, payload: TourPackageUpdate) -> TourPackage:
    package = await get_package(package_id)
    changes = payload.model_dump(exclude_unset=True)
    current = package.model_dump(include=set(TourPackageCreate.model_fields))
    try:
        merged = TourPackageCreate.model_validate({**current, **changes})
    except ValidationError as e:
        raise InvalidData(
            f"Invalid package update: {e.error_count()} field error(s)", detail=_field_errors(e)
        ) from e
    for field in changes:
        setattr(package, field, getattr(merged, field))
    package.updated_at = datetime.now(timezone.utc)
    await package.save()
    logger.info(f"Package updated: {package.id} fields={sorted(changes)}")
    return package


async def delete_package(package_id: str) -> None:
    package = await get_package(package_id)
    await package.delete()
    logger.info(f"Package deleted: {package_id}")
