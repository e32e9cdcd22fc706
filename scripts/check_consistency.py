#!/usr/bin/env python3
"""
Report registry languages without an HTML file and HTML files the registry
does not list.

Usage:
  python scripts/check_consistency.py [--root PATH]

Exits with status 1 when inconsistencies are found.
"""
from __future__ import annotations

import argparse
import os
import sys

from cms.app import build_services
from cms.core.config import get_settings
from cms.core.errors import StoreError


def main() -> None:
    ap = argparse.ArgumentParser(description="Check registry vs. article files")
    ap.add_argument("--root", help="Content root (default: CMS_ROOT_DIR or cwd)")
    args = ap.parse_args()

    if args.root:
        os.environ["CMS_ROOT_DIR"] = args.root
        get_settings.cache_clear()

    try:
        _registry, articles = build_services(get_settings())
        issues = articles.check_consistency()
    except StoreError as exc:
        raise SystemExit(f"Consistency check failed: {exc.message}")

    if not issues:
        print("Registry and article files are consistent.")
        return
    for issue in issues:
        label = "missing file" if issue.problem == "missing_file" else "orphan file"
        print(f"[{label}] {issue.code} ({issue.lang}): {issue.path}")
    sys.exit(1)


if __name__ == "__main__":
    main()
