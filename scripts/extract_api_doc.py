"""Extract the section record (or flat entries) of one markdown API doc."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from apidoc2json import ExtractionOptions, extract_api_doc_file


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract a JSON API record from a markdown API doc.")
    parser.add_argument("file", help="Markdown API doc (e.g. doc/api/fs.md)")
    parser.add_argument("--type-map", help="Type map JSON file path or URL")
    parser.add_argument("--version", help="Docs version used in permalinks (e.g. v22.x)")
    parser.add_argument("--entries", action="store_true", help="Print the flat entry list instead")
    parser.add_argument("--ignore-stability", action="store_true", help="Skip stability annotations")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log degradations at debug level")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    options = ExtractionOptions(version=args.version, ignore_stability=args.ignore_stability)
    result = asyncio.run(
        extract_api_doc_file(args.file, type_map_source=args.type_map, options=options)
    )

    if args.entries:
        payload = [
            entry.model_dump(mode="json", exclude={"content", "hierarchy_children"})
            for entry in result.entries
        ]
    else:
        payload = result.section
    print(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
