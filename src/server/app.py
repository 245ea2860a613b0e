from __future__ import annotations
import logging
from typing import Dict, List, Optional, Tuple

import requests
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from mobilede_shopify import apify_client as ac
from mobilede_shopify.config import get_settings, load_env
from mobilede_shopify.io import XLSX_MEDIA_TYPE, to_csv, to_xlsx_bytes
from mobilede_shopify.mapping import get_metafields_mapping
from mobilede_shopify.transform import explode_images, map_dataset_to_metafields, normalize_dataset


log = logging.getLogger(__name__)

load_env()

app = FastAPI(title="mobile.de → Shopify API", version="0.1.0")

FORMATS = ("json", "csv", "xlsx")


class StartRunRequest(BaseModel):
    searchUrl: Optional[str] = None
    maxItems: Optional[int] = None


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


def _apify() -> Tuple[requests.Session, ac.ApifyConfig]:
    s = get_settings()
    if not s.apify_token:
        raise HTTPException(500, "APIFY_TOKEN or APIFY_API_TOKEN must be set")
    cfg = ac.ApifyConfig(token=s.apify_token, actor_id=s.apify_actor_id)
    return ac.build_session(cfg), cfg


def _upstream_error(e: requests.HTTPError) -> HTTPException:
    status = e.response.status_code if e.response is not None else 502
    log.warning(f"Apify request failed with {status}: {e}")
    return HTTPException(status, f"Apify request failed: {e}")


def _check_format(fmt: str) -> str:
    fmt = (fmt or "").lower()
    if fmt not in FORMATS:
        raise HTTPException(400, f"Unsupported format '{fmt}', use json, csv or xlsx")
    return fmt


def _run_items(run_id: str) -> List[Dict]:
    session, cfg = _apify()
    try:
        return ac.fetch_run_items(session, cfg, run_id)
    except ac.DatasetNotFound:
        raise HTTPException(404, "Dataset ID not found for this run. Make sure the run has finished successfully.")
    except requests.HTTPError as e:
        raise _upstream_error(e)


def _respond(rows: List[Dict], fmt: str, run_id: str, kind: str) -> Response:
    if fmt == "json":
        return JSONResponse(rows)
    filename = f"{run_id}-{kind}.{fmt}"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if fmt == "csv":
        return Response(to_csv(rows), media_type="text/csv; charset=utf-8", headers=headers)
    return Response(to_xlsx_bytes(rows, sheet_title=kind[:31]), media_type=XLSX_MEDIA_TYPE, headers=headers)


@app.post("/api/start-crawl")
def start_crawl(req: StartRunRequest) -> Dict[str, str]:
    if not req.searchUrl:
        raise HTTPException(400, "searchUrl is required")
    s = get_settings()
    if not s.apify_token:
        raise HTTPException(500, "APIFY_TOKEN or APIFY_API_TOKEN must be set")
    if not s.apify_use_actor:
        raise HTTPException(400, "APIFY_USE_ACTOR=false. Cannot start actor run.")
    if not s.apify_actor_id:
        raise HTTPException(500, "APIFY_ACTOR_ID must be set")
    session, cfg = _apify()
    try:
        run = ac.start_actor_run(session, cfg, ac.build_actor_input(req.searchUrl, req.maxItems))
    except requests.HTTPError as e:
        raise _upstream_error(e)
    return {"runId": run.get("id") or ""}


@app.post("/api/start-run")
def start_run(req: StartRunRequest) -> Dict[str, str]:
    return start_crawl(req)


@app.get("/api/run-status")
def run_status(runId: str = Query(...)) -> Dict:
    session, cfg = _apify()
    try:
        return ac.get_run(session, cfg, runId)
    except requests.HTTPError as e:
        raise _upstream_error(e)


@app.get("/api/run-results")
def run_results(runId: str = Query(...), fmt: str = Query("json", alias="format"), normalized: bool = False) -> Response:
    fmt = _check_format(fmt)
    items = _run_items(runId)
    if normalized:
        return _respond(normalize_dataset(items), fmt, runId, "normalized")
    return _respond(items, fmt, runId, "raw")


@app.get("/api/normalize-results")
def normalize_results(runId: str = Query(...), fmt: str = Query("json", alias="format")) -> Response:
    fmt = _check_format(fmt)
    return _respond(normalize_dataset(_run_items(runId)), fmt, runId, "normalized")


@app.get("/api/shopify-results")
def shopify_results(runId: str = Query(...), fmt: str = Query("csv", alias="format")) -> Response:
    fmt = _check_format(fmt)
    rows = map_dataset_to_metafields(_run_items(runId), get_metafields_mapping())
    return _respond(rows, fmt, runId, "shopify")


@app.get("/api/shopify-import")
def shopify_import(runId: str = Query(...), fmt: str = Query("csv", alias="format")) -> Response:
    return shopify_results(runId=runId, fmt=fmt)


@app.get("/api/images-exploded")
def images_exploded(runId: str = Query(...), fmt: str = Query("csv", alias="format")) -> Response:
    fmt = _check_format(fmt)
    return _respond(explode_images(_run_items(runId)), fmt, runId, "images")
