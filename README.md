# schemamigrate

`schemamigrate` finds versioned schema migrations, puts them in order and hands
you their bodies. A migration is a file named after this pattern:

```
<version>_<name>.up.<ext>
<version>_<name>.down.<ext>
```

for example `1_create_users.up.sql` and `1_create_users.down.sql`. Versions are
non-negative integers up to 2**64 - 1. A version may have an up migration, a
down migration or both. Files whose names do not match the pattern are ignored.

The package has no dependencies beyond the standard library.

## Parsing names

```python
from schemamigrate.migration import Direction, ParseError, parse

m = parse("20170412214116_date_foobar.up.sql")
assert m.version == 20170412214116
assert m.identifier == "date_foobar"
assert m.direction is Direction.UP
assert m.raw == "20170412214116_date_foobar.up.sql"

try:
    parse("foobar.up.sql")
except ParseError:
    ...
```

`ParseError` is a subclass of `ValueError`; a version that is too large raises
a plain `ValueError`.

## Keeping migrations in order

`Migrations` is an ordered in-memory index of `Migration` objects. `append`
returns `False` for `None` or for a second migration with the same version and
direction. `first`, `prev`, `next`, `up` and `down` return `None` when there is
nothing to return; `prev` and `next` only answer for versions that are in the
index.

```python
from schemamigrate.migration import Direction, Migration, Migrations

ms = Migrations()
ms.append(Migration(version=1, identifier="a", direction=Direction.UP, raw="1_a.up.sql"))
ms.append(Migration(version=3, identifier="b", direction=Direction.UP, raw="3_b.up.sql"))

ms.first()     # 1
ms.next(1)     # 3
ms.prev(3)     # 1
ms.next(2)     # None, 2 is not in the index
ms.up(3)       # the Migration for version 3
ms.down(3)     # None
```

## Sources

Every source implements the abstract `Driver` class from
`schemamigrate.driver`: `open`, `close`, `first`, `prev`, `next`, `read_up` and
`read_down`. When there is no first, previous or next version, or no migration
in the requested direction, a `FileNotFoundError` is raised. `read_up` and
`read_down` return an unread binary body together with an identifier. A
driver is also a context manager that calls `close` on exit.

### Directories: `schemamigrate.fsdriver`

- `FileDriver().open(url)` reads the directory named by a `file://` URL.
  `parse_url` does the resolving: host and path are joined, a relative
  location is made absolute against the working directory, and an empty one
  means the working directory. The returned driver keeps the URL in `url` and
  the directory in `path`.
- `new(root, path)` returns an `FsDriver` over `path` inside `root`. `root` can
  be a string, a path-like, or any object that behaves like
  `importlib.resources.abc.Traversable` (`pathlib.Path`, `zipfile.Path`, the
  result of `importlib.resources.files`). `FsDriver.open` always raises
  `ValueError`.
- `PartialDriver` carries all of this except `open`; subclass it, add `open`,
  and call `init(root, path)` to index a directory.

`init` raises `FileNotFoundError` for a missing directory, `NotADirectoryError`
when the path is a file, and `DuplicateMigrationError` when two files share a
version and direction. Subdirectories are skipped. `close` calls the root's
`close` method when it has one.

```python
from schemamigrate.fsdriver import FileDriver

with FileDriver().open("file://./migrations") as source:
    version = source.first()
    body, identifier = source.read_up(version)
    with body:
        print(identifier, body.read())
```

### Named assets: `schemamigrate.bindata`

`with_instance(resource(names, asset_func))` returns a `Bindata` driver.
`names` lists the asset names; `asset_func(name)` returns an asset's bytes when
it is read. `with_instance` raises `TypeError` when not given an `AssetSource`
and `ValueError` on a duplicate migration. `Bindata.open` always raises
`ValueError`.

### S3: `schemamigrate.s3`

`with_instance(client, S3Config(bucket, prefix))` returns an `S3Driver`. The
client is any object with `list_objects(Bucket=..., Prefix=..., Delimiter=...)`
returning a mapping with `"Contents"` entries that carry a `"Key"`, and
`get_object(Bucket=..., Key=...)` returning a mapping whose `"Body"` is
readable. Only objects directly under the prefix are listed.

`parse_uri("s3://bucket/prefix")` returns `S3Config(bucket="bucket",
prefix="prefix/")`; without a path the prefix is empty. To open drivers from
URLs, give an `S3Driver` a `client_factory`:

```python
from schemamigrate.s3 import S3Driver

driver = S3Driver(client_factory=make_client).open("s3://bucket/migrations")
```

Without a factory, `open` raises `ValueError`.

### In memory: `schemamigrate.stub`

`Stub` serves whatever is put in its `migrations` attribute. The body of a
migration is its identifier, and the identifier returned is
`"<version>.up.stub"` or `"<version>.down.stub"`. `Stub().open(url)` returns an
empty stub keeping `url`; `with_instance(instance, config)` returns an empty
stub holding `instance` and a `StubConfig`. `close` sets `closed` to `True`.

### The registry

`register(name, driver)` registers a driver under a URL scheme and
`open_driver(url)` calls `open` on the driver registered for the URL's scheme.
`list_drivers()` returns the registered names. Registering a name twice,
registering `None`, or opening a URL with no scheme or an unknown one raises
`ValueError`.

Importing a source module registers its driver: `fsdriver` registers `file`,
`stub` registers `stub`, `bindata` registers `go-bindata` and `s3` registers
`s3`. The registered `s3` driver has no client factory, so opening `s3://`
URLs through the registry raises `ValueError`.

## Utilities

`schemamigrate.util` has:

- `filter_custom_query(url)`, which drops every query parameter whose name
  starts with `x-` and re-encodes the rest sorted by name;
- `suint(n)`, which returns `n` and raises `ValueError` for negative numbers;
- `MultiError(*errs)`, an exception that drops `None` entries and joins the
  non-empty messages of the others with `" and "`.

## What it does not do

The package only finds and reads migrations. It does not connect to any
database, does not apply migrations or record which version a database is at,
and has no command-line tool.