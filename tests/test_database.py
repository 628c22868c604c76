import pytest

from tourbook.database import database_name


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("mongodb://localhost:27017/", "tourbook"),
        ("mongodb://localhost:27017", "tourbook"),
        ("mongodb://localhost:27017/tours_prod", "tours_prod"),
        ("mongodb://user:pw@db1:27017,db2:27017/tours?replicaSet=rs0", "tours"),
    ],
)
def test_database_name_from_uri(uri, expected):
    assert database_name(uri) == expected


async def test_ping_without_connection_is_false():
    from tourbook.database import ping_db

    assert await ping_db() is False
