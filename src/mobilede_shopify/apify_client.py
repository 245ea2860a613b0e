from __future__ import annotations
import json
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests


log = logging.getLogger(__name__)

API_BASE = "https://api.apify.com/v2"
TERMINAL_STATUSES = ("SUCCEEDED", "FAILED", "ABORTED", "TIMED-OUT")
DEFAULT_MAX_ITEMS = 5000


@dataclass
class ApifyConfig:
    token: str
    actor_id: str = ""
    base_url: str = API_BASE

    def actor_path(self) -> str:
        # "user/actor" ids must be addressed as "user~actor"
        return self.actor_id.replace("/", "~")


def build_session(cfg: ApifyConfig) -> requests.Session:
    s = requests.Session()
    s.headers.update(
        {
            "Authorization": f"Bearer {cfg.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "mobilede-shopify/1.0",
        }
    )
    return s


def _request(session: requests.Session, method: str, url: str, **kwargs) -> requests.Response:
    backoff = 1.0
    while True:
        resp = session.request(method, url, **kwargs)
        if resp.status_code == 429:
            retry_after = float(resp.headers.get("Retry-After", backoff))
            log.info(f"Rate limited by Apify, retrying in {retry_after:.1f}s")
            time.sleep(retry_after)
            backoff = min(backoff * 2, 10.0)
            continue
        resp.raise_for_status()
        return resp


def build_actor_input(search_url: str, max_items: Optional[int] = None) -> Dict:
    """Input document for the mobile.de search scraper actor."""
    payload: Dict[str, object] = {
        "searchPageURLs": [search_url],
        "searchPageURLMaxItems": DEFAULT_MAX_ITEMS,
        "reviewLimit": 0,
        "automaticPaging": True,
        "searchCategory": "Car",
        "searchTerms": [],
        "models": [],
        "sort": "Standard",
    }
    if max_items:
        payload["maxItems"] = int(max_items)
    return payload


def start_actor_run(session: requests.Session, cfg: ApifyConfig, actor_input: Dict) -> Dict:
    url = f"{cfg.base_url}/acts/{cfg.actor_path()}/runs"
    resp = _request(session, "POST", url, data=json.dumps(actor_input))
    run = (resp.json() or {}).get("data") or {}
    log.info(f"Started actor run {run.get('id')} for {cfg.actor_id}")
    return run


def get_run(session: requests.Session, cfg: ApifyConfig, run_id: str) -> Dict:
    url = f"{cfg.base_url}/actor-runs/{run_id}"
    resp = _request(session, "GET", url)
    data = resp.json() or {}
    return data.get("data") or data


def get_dataset_id(run: Dict) -> str:
    return (run or {}).get("defaultDatasetId") or ""


def fetch_dataset_items(session: requests.Session, cfg: ApifyConfig, dataset_id: str) -> List[Dict]:
    url = f"{cfg.base_url}/datasets/{dataset_id}/items"
    resp = _request(session, "GET", url, params={"clean": "true", "format": "json"})
    items = resp.json()
    if not isinstance(items, list):
        return []
    log.info(f"Fetched {len(items)} items from dataset {dataset_id}")
    return items


class DatasetNotFound(LookupError):
    pass


def fetch_run_items(session: requests.Session, cfg: ApifyConfig, run_id: str) -> List[Dict]:
    """Items of a run's default dataset. Raises DatasetNotFound when the run has none yet."""
    run = get_run(session, cfg, run_id)
    dataset_id = get_dataset_id(run)
    if not dataset_id:
        raise DatasetNotFound(f"Dataset ID not found for run {run_id}")
    return fetch_dataset_items(session, cfg, dataset_id)


def wait_for_run(
    session: requests.Session,
    cfg: ApifyConfig,
    run_id: str,
    poll_interval: float = 5.0,
    timeout: float = 900.0,
) -> Dict:
    deadline = time.monotonic() + timeout
    while True:
        run = get_run(session, cfg, run_id)
        status = run.get("status") or ""
        if status in TERMINAL_STATUSES:
            log.info(f"Run {run_id} finished with status {status}")
            return run
        if time.monotonic() >= deadline:
            raise TimeoutError(f"Run {run_id} still {status or 'pending'} after {timeout:.0f}s")
        log.debug(f"Run {run_id} status {status}, polling again in {poll_interval}s")
        time.sleep(poll_interval)
