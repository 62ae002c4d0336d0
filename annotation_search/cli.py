"""
Command-line front end for ad-hoc queries against an annotation export.

Usage:
    python -m annotation_search --annotations export.json search "deep learning" --tag ml
    python -m annotation_search suggest tra --limit 10
    python -m annotation_search popular-tags

The export is a JSON array of annotation records, or an object with an
``annotations`` array.  Output is JSON on stdout.
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .engine import AnnotationSearchEngine
from .errors import SearchRequestError

ENV_DATA_PATH = "ANNOTATION_SEARCH_DATA"


def _load_records(path: str) -> list:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("annotations", [])
    return data


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="annotation-search",
        description="Search, facet and suggest over an annotation export.",
    )
    parser.add_argument(
        "--annotations",
        default=None,
        help=f"Path to the JSON export. Defaults to ${ENV_DATA_PATH}.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Run a filtered search.")
    search.add_argument("query", nargs="?", default=None)
    search.add_argument("--document", dest="document_id")
    search.add_argument("--author", dest="author_id")
    search.add_argument("--platform", action="append")
    search.add_argument("--type", action="append")
    search.add_argument("--tag", dest="tags", action="append")
    search.add_argument("--color", dest="colors", action="append")
    search.add_argument("--visibility", choices=["public", "private", "shared"])
    search.add_argument("--has-comment", dest="has_comment", action="store_true", default=None)
    search.add_argument("--no-comment", dest="has_comment", action="store_false", default=None)
    search.add_argument("--since", help="created_at lower bound (ISO-8601, inclusive)")
    search.add_argument("--until", help="created_at upper bound (ISO-8601, exclusive)")
    search.add_argument("--sort-by", default="createdAt",
                        choices=["createdAt", "modifiedAt", "author", "relevance"])
    search.add_argument("--sort-order", default="desc", choices=["asc", "desc"])
    search.add_argument("--match", dest="text_mode", default="any", choices=["any", "all"])
    search.add_argument("--page", type=int, default=1)
    search.add_argument("--limit", type=int, default=None)

    suggest = sub.add_parser("suggest", help="Autocomplete suggestions for a prefix.")
    suggest.add_argument("query")
    suggest.add_argument("--limit", type=int, default=5)

    tags = sub.add_parser("popular-tags", help="Most used tags.")
    tags.add_argument("--limit", type=int, default=20)

    return parser


def _search_request(args) -> dict:
    request = {
        "query": args.query,
        "document_id": args.document_id,
        "author_id": args.author_id,
        "platform": args.platform,
        "type": args.type,
        "tags": args.tags,
        "colors": args.colors,
        "visibility": args.visibility,
        "has_comment": args.has_comment,
        "sort_by": args.sort_by,
        "sort_order": args.sort_order,
        "text_mode": args.text_mode,
        "page": args.page,
        "limit": args.limit,
    }
    if args.since or args.until:
        request["date_range"] = {"start": args.since, "end": args.until}
    return request


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = args.annotations or os.environ.get(ENV_DATA_PATH)
    if not path:
        print(f"ERROR: pass --annotations or set ${ENV_DATA_PATH}", file=sys.stderr)
        return 2

    try:
        engine = AnnotationSearchEngine(_load_records(path))
        if args.command == "search":
            output = engine.search(_search_request(args)).to_dict()
        elif args.command == "suggest":
            output = engine.get_suggestions(args.query, args.limit)
        else:
            output = [{"tag": tag, "count": count}
                      for tag, count in engine.get_popular_tags(args.limit)]
    except (OSError, json.JSONDecodeError) as e:
        print(f"ERROR: could not read {path}: {e}", file=sys.stderr)
        return 1
    except SearchRequestError as e:
        print(f"ERROR: {e.code_name}: {e.message}", file=sys.stderr)
        return 2

    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
