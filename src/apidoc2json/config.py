"""Local configuration for apidoc2json."""

from __future__ import annotations

import os


DEFAULT_BASE_URL = "https://nodejs.org/"
DEFAULT_DOC_VERSION = "latest"
DEFAULT_MODULE_PREFIX = "node"
# Indent of a nested list item. Blocks outside of lists need four spaces to
# become indented code.
DEFAULT_MARKDOWN_TAB_LENGTH = 2
DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_FETCH_MAX_RETRIES = 2
DEFAULT_FETCH_BACKOFF_S = 0.5
DEFAULT_USER_AGENT = "apidoc2json/0.1 (+https://github.com/apidoc2json/apidoc2json)"

# Permalink within the published docs that explains the stability index.
DOC_API_STABILITY_SECTION_REF_URL = "documentation.html#stability-index"

DOC_MAN_BASE_URL = "http://man7.org/linux/man-pages/man"

APIDOC2JSON_BASE_URL = os.getenv("APIDOC2JSON_BASE_URL", DEFAULT_BASE_URL)
APIDOC2JSON_DOC_VERSION = os.getenv("APIDOC2JSON_DOC_VERSION", DEFAULT_DOC_VERSION)
APIDOC2JSON_MODULE_PREFIX = os.getenv("APIDOC2JSON_MODULE_PREFIX", DEFAULT_MODULE_PREFIX)
APIDOC2JSON_MARKDOWN_TAB_LENGTH = int(
    os.getenv("APIDOC2JSON_MARKDOWN_TAB_LENGTH", str(DEFAULT_MARKDOWN_TAB_LENGTH))
)
APIDOC2JSON_FETCH_TIMEOUT_S = float(os.getenv("APIDOC2JSON_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)))
APIDOC2JSON_FETCH_MAX_RETRIES = int(os.getenv("APIDOC2JSON_FETCH_MAX_RETRIES", str(DEFAULT_FETCH_MAX_RETRIES)))
APIDOC2JSON_FETCH_BACKOFF_S = float(os.getenv("APIDOC2JSON_FETCH_BACKOFF_S", str(DEFAULT_FETCH_BACKOFF_S)))
APIDOC2JSON_USER_AGENT = os.getenv("APIDOC2JSON_USER_AGENT", DEFAULT_USER_AGENT)
