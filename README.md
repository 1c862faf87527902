# bonddb

Building blocks for an ordered key-value table store:

- **Key encoding** (`bonddb.keys`). `KeyBuilder` appends numbered fields.
  The byte order of each field matches the order of its values, so signed
  integers and big integers sort correctly. `Key`, `key_encode`,
  `key_decode`, `key_encode_raw` and `KeyBytes` build the
  table / index / index-order / primary-key layout and take it apart.
  `key_prefix` and `key_prefix_split` give the length of a key's prefix.
- **Selectors** (`bonddb.selector`). `SelectorPoint`, `SelectorPoints`,
  `SelectorRange` and `SelectorRanges` describe a starting point or the
  inclusive ranges that a scan covers. Each one has a `type` attribute, which
  is a `SelectorType` value.
- **Iterators** (`bonddb.iter`).
  - `IterOptions` holds the lower and upper bounds. It can also hold an
    optional release hook.
  - `MultiIterator` walks several option sets one after another, as one
    sequence.
  - `ReleasingIterator` runs the release hook when it is closed.
  - `ErrorIterator` is an empty iterator that reports an error. It is used
    when opening an iterator raises.
  - Iterators are made by a constructor that you pass in. It is a callable
    that takes an `IterOptions`.
- **Storage options** (`bonddb.options`). There are low, medium and high
  `PerformanceProfile` presets, each a `StorageOptions` value.
  `get_max_open_file_limit` works out a limit on open files from the
  system's `RLIMIT_NOFILE`.
- **Serializers** (`bonddb.serializers`).
  - `CBORSerializer` is the default in `Options`.
  - `JsonSerializer` is also available.
  - `ProtobufSerializer` accepts messages that provide `marshal_vt` /
    `unmarshal_vt`, or standard messages together with an encoder and a
    decoder that you supply.
- **Helpers**.
  - `Lazy` (`bonddb.lazy`) computes a value only when `get()` is called.
  - `SyncBatch` (`bonddb.sync`) runs a function on a shared batch while it
    holds a lock.
  - `SerializerAnyWrapper` (`bonddb.serializer`) adapts a general
    serializer.

## Installation

```
pip install bonddb
```

## Keys

```python
from bonddb.keys import Key, KeyBuilder, key_decode, key_encode

index = KeyBuilder().add_string_field("0xtestAccount").to_bytes()
primary = KeyBuilder().add_uint64_field(42).to_bytes()

raw = key_encode(Key(table_id=1, index_id=1, index=index, index_order=b"", primary_key=primary))
key = key_decode(raw)
assert key.primary_key == primary
```

Each field starts with its field number. A signed field is followed by a
sign byte. Negative values sort before zero, and zero sorts before positive
values:

```python
KeyBuilder().add_int16_field(-10).to_bytes()  # b"\x01\x00\xff\xf5"
```

Some inputs raise `ValueError`:

- a value that does not fit the field's width;
- malformed input to `key_decode`.

## Serializers

```python
from bonddb.serializers.cbor_serializer import CBORSerializer

serializer = CBORSerializer()
data = serializer.serialize({"id": 5, "balance": 7})
assert serializer.deserialize(data) == {"id": 5, "balance": 7}
```

Dataclass instances are written as maps by both the CBOR and the JSON
serializer.

## Storage options

```python
from bonddb.options import PerformanceProfile, default_options, to_performance_profile

opts = default_options(to_performance_profile("high"))
assert to_performance_profile("unknown") is PerformanceProfile.MEDIUM
```

## What this package does not do

The package has no storage engine, no tables, no indexes and no query
execution:

- `StorageOptions` only describes tuning values. Nothing in the package
  applies them.
- The iterators do not read data themselves. They wrap iterators that come
  from the constructor you provide.

## Running the tests

```
pip install -e ".[test]"
pytest
```