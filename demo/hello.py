#!/usr/bin/env python3
"""
Demo: clear, index and query a Solr core.

Requires a running Solr with a core named ``test``:

  bin/solr start && bin/solr create -c test

Usage (from repository root):
  python demo/hello.py
  HELIOTROPE_BASE_URL=http://solr:8983/solr/test python demo/hello.py
"""

import os
import sys

# Run from repo root: add src to path
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.join(_REPO_ROOT, "src"))
from heliotrope import Document, SolrClient, SolrConfig, SolrError, SolrQuery

BASE_URL = os.environ.get("HELIOTROPE_BASE_URL", "http://localhost:8983/solr/test")


def main() -> int:
    print("Starting example hello...")
    with SolrClient(SolrConfig(base_url=BASE_URL)) as client:
        try:
            print(f"Removing documents matching city:NY from {BASE_URL}")
            client.delete_by_query("city:NY")

            doc = Document().add_field("id", "1").add_field("city", "London")
            print(f"Prepared document {doc!r}")
            client.add_and_commit(doc)

            print("Retrieving all documents by query *:*")
            page = client.query(SolrQuery("*:*"))
        except SolrError as exc:
            print(f"Solr request failed (status={exc.status}): {exc.message}", file=sys.stderr)
            return 1

    print(f"Found {page.total} document(s), showing {len(page.items)} from offset {page.start}")
    for item in page.items:
        print(f"  {item.to_dict()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
