"""CLI entry point: python -m heliotrope {query,add,delete,commit} ...

Examples::

    python -m heliotrope --url http://localhost:8983/solr/test query '*:*' --rows 5
    python -m heliotrope add id=1 city=London tag=a tag=b
    python -m heliotrope delete 'city:NY'

Field values given to ``add`` are read as JSON scalars when they parse as
one (``count=3``, ``flag=true``) and as strings otherwise; quote them to
force a string (``id='"1"'``).
"""

import argparse
import dataclasses
import json
import logging
import sys
from typing import Any

from heliotrope.client import SolrClient
from heliotrope.config import SolrConfig
from heliotrope.document import Document
from heliotrope.logging import bind_request_id, configure_logging
from heliotrope.models import SolrError, SolrQuery


def _parse_assignment(raw: str) -> tuple[str, Any]:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise ValueError(f"expected FIELD=VALUE, got {raw!r}")
    try:
        parsed = json.loads(value)
    except ValueError:
        return name, value
    if isinstance(parsed, (dict, list)):
        return name, value
    return name, parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heliotrope",
        description="Index, delete and query documents in a Solr core",
    )
    parser.add_argument("--url", default=None, help="Core URL (default: $HELIOTROPE_BASE_URL)")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable DEBUG-level logging to stderr"
    )
    parser.add_argument(
        "--json-log", action="store_true", help="Emit JSON log lines (default: text)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    q = sub.add_parser("query", help="Run a search and print one page of results")
    q.add_argument("expression", nargs="+", help="Raw Solr query expression")
    q.add_argument("--start", type=int, default=0, help="Zero-based offset")
    q.add_argument("--rows", type=int, default=None, help="Page size")
    q.add_argument("--fl", action="append", default=[], help="Field to return (repeatable)")
    q.add_argument("--fq", action="append", default=[], help="Filter query (repeatable)")
    q.add_argument("--sort", default=None, help="Sort clause, e.g. 'id asc'")

    a = sub.add_parser("add", help="Add one document")
    a.add_argument("fields", nargs="+", metavar="FIELD=VALUE", help="Field assignment")
    a.add_argument("--no-commit", action="store_true", help="Do not commit after adding")

    d = sub.add_parser("delete", help="Delete documents matching a query")
    d.add_argument("expression", nargs="+", help="Raw Solr query expression")
    d.add_argument("--no-commit", action="store_true", help="Do not commit after deleting")

    sub.add_parser("commit", help="Commit pending writes")
    return parser


def _run(client: SolrClient, args: argparse.Namespace) -> dict[str, Any]:
    if args.command == "query":
        query = SolrQuery(
            q=" ".join(args.expression),
            start=args.start,
            rows=args.rows,
            fields=tuple(args.fl),
            filters=tuple(args.fq),
            sort=args.sort,
        )
        return client.query(query).to_dict()
    if args.command == "add":
        doc = Document.from_pairs(_parse_assignment(raw) for raw in args.fields)
        if args.no_commit:
            return dataclasses.asdict(client.add(doc))
        return dataclasses.asdict(client.add_and_commit(doc))
    if args.command == "delete":
        resp = client.delete_by_query(" ".join(args.expression), commit=not args.no_commit)
        return dataclasses.asdict(resp)
    return dataclasses.asdict(client.commit())


def main() -> None:
    args = _build_parser().parse_args()

    level = logging.DEBUG if args.verbose else logging.WARNING
    configure_logging(level=level, json_format=args.json_log)
    bind_request_id()

    try:
        config = SolrConfig.from_env(base_url=args.url)
        with SolrClient(config) as client:
            output = _run(client, args)
    except (SolrError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(output, indent=2, default=str))


if __name__ == "__main__":
    main()
