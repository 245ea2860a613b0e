#!/usr/bin/env python3
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from mobilede_shopify import apify_client as ac
from mobilede_shopify.config import get_settings, load_env
from mobilede_shopify.io import read_dataset
from mobilede_shopify.mapping import load_mapping, load_metafields_mapping
from mobilede_shopify.transform import SHAPE_FINAL, SHAPE_TEMPLATE, SHAPES, transform_items, write_output


log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Transform mobile.de scraper listings into Shopify import rows.")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--input", help="Scraped dataset file (.json, .jsonl, .csv or .xlsx)")
    src.add_argument("--run-id", help="Fetch the dataset of a finished Apify actor run")
    src.add_argument("--search-url", help="Start a new actor run for a mobile.de search URL and wait for it")
    p.add_argument("--max-items", type=int, default=0, help="Item cap for --search-url runs; 0 means no cap")
    p.add_argument("--output", required=True, help="Output path (.csv, .xlsx or .json)")
    p.add_argument("--shape", default=SHAPE_FINAL, choices=SHAPES, help="Output row shape (default: final)")
    p.add_argument("--metafields-file", help="Metafields mapping workbook (or set METAFIELDS_MAPPING_FILE)")
    p.add_argument("--mapping-file", help="Shopify/Source mapping workbook for --shape template")
    p.add_argument("--dotenv", help="Path to .env file (optional)")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v for INFO, -vv for DEBUG)")
    return p.parse_args(argv)


def fetch_items(args: argparse.Namespace) -> list:
    if args.input:
        return read_dataset(Path(args.input))
    s = get_settings()
    if not s.apify_token:
        raise RuntimeError("APIFY_TOKEN or APIFY_API_TOKEN must be set")
    cfg = ac.ApifyConfig(token=s.apify_token, actor_id=s.apify_actor_id)
    session = ac.build_session(cfg)
    run_id = args.run_id
    if args.search_url:
        if not cfg.actor_id:
            raise RuntimeError("APIFY_ACTOR_ID must be set")
        run = ac.start_actor_run(session, cfg, ac.build_actor_input(args.search_url, args.max_items))
        run_id = run.get("id") or ""
        print(f"Started run {run_id}")
        run = ac.wait_for_run(session, cfg, run_id, poll_interval=s.poll_interval, timeout=s.run_timeout)
        if run.get("status") != "SUCCEEDED":
            raise RuntimeError(f"Run {run_id} ended with status {run.get('status')}")
    return ac.fetch_run_items(session, cfg, run_id)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")
    load_env(args.dotenv)
    try:
        return run(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run(args: argparse.Namespace) -> int:
    items = fetch_items(args)
    log.info(f"Loaded {len(items)} listings")

    metafields_file = args.metafields_file or get_settings().metafields_mapping_file
    mapping_list = load_metafields_mapping(metafields_file)
    template_mapping = None
    if args.shape == SHAPE_TEMPLATE:
        template_mapping = load_mapping(args.mapping_file or get_settings().mapping_file)

    rows = transform_items(items, shape=args.shape, mapping_list=mapping_list, template_mapping=template_mapping)
    output_path = Path(args.output)
    write_output(output_path, rows)
    print(f"Wrote {len(rows)} rows to {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
