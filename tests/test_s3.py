import errno
import io

import pytest

from schemamigrate.driver import list_drivers
from schemamigrate.s3 import S3Config, S3Driver, parse_uri, with_instance

OBJECTS = {
    "staging/migrations/1_foobar.up.sql": "1 up",
    "staging/migrations/1_foobar.down.sql": "1 down",
    "prod/migrations/1_foobar.up.sql": "1 up",
    "prod/migrations/1_foobar.down.sql": "1 down",
    "prod/migrations/3_foobar.up.sql": "3 up",
    "prod/migrations/4_foobar.up.sql": "4 up",
    "prod/migrations/4_foobar.down.sql": "4 down",
    "prod/migrations/5_foobar.down.sql": "5 down",
    "prod/migrations/7_foobar.up.sql": "7 up",
    "prod/migrations/7_foobar.down.sql": "7 down",
    "prod/migrations/not-a-migration.txt": "",
    "prod/migrations/0-random-stuff/whatever.txt": "",
}

STEPS = [
    ("next", 1, 3), ("next", 3, 4), ("next", 4, 5), ("next", 5, 7),
    ("prev", 3, 1), ("prev", 4, 3), ("prev", 5, 4), ("prev", 7, 5),
]
DEAD_ENDS = [("next", v) for v in (0, 2, 6, 7, 8, 9)] + [("prev", v) for v in (0, 1, 2, 6, 8, 9)]


class FakeS3:
    def __init__(self, bucket, objects):
        self.bucket = bucket
        self.objects = objects

    def _check(self, bucket):
        if bucket != self.bucket:
            raise LookupError("bucket not found")

    def list_objects(self, *, Bucket, Prefix, Delimiter=""):
        self._check(Bucket)
        contents = [
            {"Key": name}
            for name in self.objects
            if name.startswith(Prefix)
            and (not Delimiter or Delimiter not in name.replace(Prefix, "", 1))
        ]
        return {"Contents": contents}

    def get_object(self, *, Bucket, Key):
        self._check(Bucket)
        if Key not in self.objects:
            raise LookupError("object not found")
        return {"Body": io.BytesIO(self.objects[Key].encode())}


@pytest.fixture
def driver():
    client = FakeS3("some-bucket", OBJECTS)
    return with_instance(client, S3Config(bucket="some-bucket", prefix="prod/migrations/"))


def _error_number(call, version):
    try:
        call(version)
    except FileNotFoundError as exc:
        return exc.errno
    return None


def test_first(driver):
    assert driver.first() == 1


@pytest.mark.parametrize("method,version,expected", STEPS)
def test_steps(driver, method, version, expected):
    assert getattr(driver, method)(version) == expected


@pytest.mark.parametrize("method,version", DEAD_ENDS)
def test_dead_ends(driver, method, version):
    assert _error_number(getattr(driver, method), version) == errno.ENOENT


@pytest.mark.parametrize("direction", ["up", "down"])
@pytest.mark.parametrize("version", range(9))
def test_read(driver, version, direction):
    key = f"prod/migrations/{version}_foobar.{direction}.sql"
    read = getattr(driver, f"read_{direction}")
    if key not in OBJECTS:
        assert _error_number(read, version) == errno.ENOENT
        return
    body, identifier = read(version)
    with body:
        assert body.read() == OBJECTS[key].encode()
    assert identifier == "foobar"


@pytest.mark.parametrize(
    "uri,expected",
    [
        ("s3://migration-bucket/production", S3Config(bucket="migration-bucket", prefix="production/")),
        ("s3://migration-bucket", S3Config(bucket="migration-bucket")),
        ("s3://migration-bucket/production/", S3Config(bucket="migration-bucket", prefix="production/")),
        ("s3://migration-bucket/", S3Config(bucket="migration-bucket")),
    ],
)
def test_parse_uri(uri, expected):
    assert parse_uri(uri) == expected


def test_unknown_bucket():
    client = FakeS3("some-bucket", OBJECTS)
    with pytest.raises(LookupError):
        with_instance(client, S3Config(bucket="other-bucket", prefix="prod/migrations/"))


def test_duplicate_version():
    client = FakeS3("b", {"p/1_foo.up.sql": "", "p/1_bar.up.sql": ""})
    with pytest.raises(ValueError, match="unable to parse file p/1_"):
        with_instance(client, S3Config(bucket="b", prefix="p/"))


def test_open_with_client_factory():
    client = FakeS3("some-bucket", OBJECTS)
    d = S3Driver(client_factory=lambda: client).open("s3://some-bucket/staging/migrations")
    assert d.config == S3Config(bucket="some-bucket", prefix="staging/migrations/")
    assert d.first() == 1
    assert _error_number(d.next, 1) == errno.ENOENT


def test_open_without_factory():
    with pytest.raises(ValueError):
        S3Driver().open("s3://some-bucket/prod")


def test_registered():
    assert "s3" in list_drivers()