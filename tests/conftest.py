"""Test setup for apidoc2json."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


FS_DOC = """\
# File system

<!--introduced_in=v0.10.0-->

> Stability: 2 - Stable

The `node:fs` module enables interacting with the file system.

```js
import { readFile } from 'node:fs';
```

## Class: `fs.Dir`

<!-- YAML
added: v12.12.0
-->

* Extends: {EventEmitter}

A class representing a directory stream.

### `dir.close([callback])`

<!-- YAML
added: v12.12.0
changes:
  - version: v18.0.0
    pr-url: https://github.com/nodejs/node/pull/41678
    description: Passing an invalid callback now throws.
-->

* `callback` {Function} Called once the handle is closed.
* Returns: {Promise}

Asynchronously close the directory's underlying resource handle.

### `dir.path`

* Type: {string}

The read-only path of this directory.

## `fs.readFile(path[, options], callback)`

* `path` {string|Buffer} filename or file descriptor
* `options` {Object|string}
  * `encoding` {string|null} **Default:** `null`
  * `flag` {string} See open(2). **Default:** `'r'`.
* `callback` {Function}

Asynchronously reads the entire contents of a file.

### Performance notes

Reading the whole file buffers it in memory.

## Event: `'close'`

* `code` {integer} Exit code.

Emitted when the stream closes.
"""


@pytest.fixture
def fs_doc() -> str:
    """A small API doc covering modules, classes, methods, events and prose."""
    return FS_DOC
