# budx

This package provides small building blocks for Python programs:

- `budx.linkedmap.LinkedMap` is a thread-safe map that keeps keys in the order they were first appended.
- `budx.sets` provides `Set`, `StringSet` and `IntSet`, which are lightweight sets with chaining mutators.
- `budx.config` reads HOCON-style configuration text into a `Config`. Values in a `Config` are looked up by dotted key paths.
- `budx.scanner` contains the state machine behind the loader.
- `budx.escapes` contains the string-unescaping helpers that the loader uses.

## Installation

```
pip install .
```

## Configuration files

The format is a relaxed superset of JSON:

```
# comments start with a hash
test1 {
    num = 1
    ok = true
    comment = "#"
}
test2.mylist = ["1", "2", "3"]
include "other.conf"
```

The format works as follows:

- Keys may be written with dots (`a.b.c = 1`) or nested in braces.
- A value may follow either `:` or `=`.
- Strings may be left unquoted.
- `true`, `false` and `null` are keywords.
- Quoted strings understand the usual backslash escapes, including `\uXXXX`.
- `include <file>` pulls in another file. A relative path is resolved from the directory of the including file.
- Every number read from text is stored as a `float`.

```python
from budx.config import load, read

conf = load("app.conf")                       # relative paths use the cwd
conf.get_int("test1.num")                     # 1  (floats are truncated)
conf.get_bool("test1.ok")                     # True
conf.get_str("test1.missing", "fallback")     # "fallback"
conf.get_strings("test2.mylist")              # ["1", "2", "3"]

sub = conf.sub_config("test1")                # a Config, or None
for key, sub_conf in conf.sub_configs():      # sub_conf is None for non-mappings
    ...

conf.merge("test1.num", 2)
conf.merge("", {"extra": {"flag": True}})
```

### Reading from a stream

`read(stream)` parses an open text or binary stream instead of a path.

### Getters

Each getter takes a key and an optional default: `get_int`, `get_float`, `get_str`, `get_bool`, `get_strings` and `get_bools`.

- A getter returns the default when the key is missing or the value has another type.
- `get_strings` and `get_bools` keep only the list items of the wanted type. If no such item is left, they return the default.

### Merging

`merge(key, value)` changes the value at a key path:

- Scalars replace the existing value.
- Lists of strings also replace the existing value.
- Mappings are merged key by key. Missing intermediate levels are created.
- Values of any other type are ignored.

### Copying values onto an object

`Config.apply_to(obj)` copies top-level values onto the attributes of an object.

- A key such as `httpPort` matches an attribute named `httpPort`, `HttpPort` or `http_port`.
- The attribute's current value decides which type is read. When that value is `None`, the type annotation decides instead.
- Values of other types are skipped.

### Errors and lower-level access

Syntax errors raise `budx.scanner.ConfigSyntaxError`. A failed `include` raises it as well. The message reports the offending character and its byte offset.

`budx.scanner.FileScanner` can be used directly:

- `scan_file(path)` scans a file and needs an absolute path.
- `scan_stream(reader)` scans an open stream.
- Both collect `KeyValue` pairs in `scanner.pairs`.
- `apply(mapping)` writes the collected pairs into a nested mapping.

`budx.escapes.unescape(data)` resolves backslash escapes in a string body. Invalid UTF-8 and unpaired surrogates become U+FFFD. `budx.escapes.quote_char(code)` formats a character code as a single-quoted literal.

## Containers

```python
from budx.linkedmap import LinkedMap
from budx.sets import Set, StringSet, IntSet

m = LinkedMap()
m.append("ppp", "123")
m.append("ttt", "999")
m.append("ttt", "333")   # replaces the value, keeps the position
m.remove("ppp")          # True; False if the key was absent
m.get("nope")            # None
"ttt" in m               # True
m.items()                # [("ttt", "333")]

s = StringSet("1", "2", "3")
s.subtract("1", "3", "5")
s.to_list()              # ["2"]
```

Set behaviour:

- `Set` never stores `None`.
- `StringSet` never stores the empty string, and it raises `TypeError` for items that are not strings.
- `IntSet` stores any non-integer item as `0`.
- `add`, `remove`, `union` and `subtract` return the set itself, so calls can be chained.

## What this package does not do

The package has no command-line tool. The configuration support only reads text: it cannot write a `Config` back out. It also does not support HOCON substitutions, duration or size units, or value concatenation.

## Running the tests

```
pip install .[test]
pytest
```