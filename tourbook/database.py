from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import ConfigurationError, PyMongoError
from pymongo.uri_parser import parse_uri

from tourbook.config import get_settings
from tourbook.utils.logger import get_logger

logger = get_logger("database")

DEFAULT_DB_NAME = "tourbook"

_mongo_client: AsyncIOMotorClient | None = None


def database_name(uri: str) -> str:
    """Database named in the URI path, or ``tourbook`` when the path is empty."""
    try:
        name = parse_uri(uri).get("database")
    except (ConfigurationError, ValueError):
        # mongodb+srv needs DNS to parse; fall back to reading the path by hand
        name = uri.rsplit("/", 1)[-1].split("?")[0]
    return name or DEFAULT_DB_NAME


async def init_db() -> None:
    """Connect to MongoDB and register the Beanie documents."""
    global _mongo_client
    from tourbook.models import Inquiry, TourPackage, User

    uri = get_settings().MONGODB_URI
    _mongo_client = AsyncIOMotorClient(uri)
    db_name = database_name(uri)
    await init_beanie(
        database=_mongo_client[db_name],
        document_models=[User, TourPackage, Inquiry],
    )
    logger.info(f"Beanie initialized on database {db_name!r}")


async def ping_db() -> bool:
    if not _mongo_client:
        return False
    try:
        await _mongo_client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False


def close_db() -> None:
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
