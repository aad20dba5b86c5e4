"""
Inventory of the data available on WQP for the site/variable combinations
we need.

The national "what data" call no longer works, so the inventory is pulled
per state. When a state-wide call fails, the state is retried once as two
calls covering half of its counties each. There is no deeper splitting: a
failing county-half call ends the state's inventory with
SubRegionQueryError. Dense states that fail at county-half scope are a
known limit of this approach.
"""

# pylint: disable=W0718

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from src.wqp_api.api_abstract import WaterQualityDataAPI
from src.wqp_api.support_functions.support_functions import TimedFrame, split_in_half, timed_call
from src.wqp_pull.errors import SubRegionQueryError
from src.utils.config import PullParams
from src.utils.pull_logger import get_logger

log = get_logger("inventory")

# how many times a failing scope may be halved
SPLIT_DEPTH = 1

INVENTORY_COLUMNS = [
    "OrganizationIdentifier",
    "MonitoringLocationIdentifier",
    "ResolvedMonitoringLocationTypeName",
    "StateName",
    "CountyName",
    "HUCEightDigitCode",
    "latitude",
    "longitude",
    "resultCount",
]


@dataclass(frozen=True)
class Region:
    """A state (US:NN) and its county codes (US:NN:CCC)."""
    state_id: str
    county_codes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InventoryPull:
    """Sites found for one region, how long the calls took and how many rows came back."""
    out: pd.DataFrame
    time: float
    nrow: int


def get_states(api: WaterQualityDataAPI) -> List[Region]:
    """Every state WQP knows about, with its counties."""
    regions = []
    for state_id in api.fetch_state_codes():
        regions.append(Region(state_id=state_id, county_codes=tuple(api.fetch_county_codes(state_id))))
    log.info("Loaded %d states with %d counties", len(regions), sum(len(r.county_codes) for r in regions))
    return regions


def _merge(parts: Sequence[TimedFrame]) -> TimedFrame:
    frames = [p.out for p in parts if len(p.out.columns)]
    out = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
    return TimedFrame(
        time=sum(p.time for p in parts),
        nrow=sum(p.nrow for p in parts),
        out=out,
    )


def _fetch_counties(
                    api: WaterQualityDataAPI,
                    region: Region,
                    names: List[str],
                    counties: Sequence[str],
                    depth: int,
                    ) -> TimedFrame:
    try:
        return timed_call(api.fetch_site_inventory, names, countycode=list(counties))
    except Exception as e:
        if depth <= 0:
            raise SubRegionQueryError(
                region.state_id, f"call for {len(counties)} counties failed: {e}"
            ) from e
        return _split(api, region, names, counties, depth, e)


def _split(
            api: WaterQualityDataAPI,
            region: Region,
            names: List[str],
            counties: Sequence[str],
            depth: int,
            cause: Exception,
            ) -> TimedFrame:
    if not counties:
        raise SubRegionQueryError(region.state_id, "call failed and there are no counties to split by") from cause
    parts = [
        _fetch_counties(api, region, names, half, depth - 1)
        for half in split_in_half(counties)
        if half
    ]
    return _merge(parts)


def inventory_wqp(
                    region: Region,
                    pull_params: PullParams,
                    api: WaterQualityDataAPI,
                    ) -> InventoryPull:
    """
    Inventory one state, falling back to two county-half calls if the
    state-wide call fails.

    Args:
        region: State to inventory, with the county codes used for the fallback.
        pull_params: All characteristicName synonyms are collapsed into one request.
        api: Remote source.

    Returns:
        InventoryPull with one row per site. The county-half results are
        concatenated as-is, their times and row counts summed.
    """
    names = pull_params.flat_characteristic_names

    log.info("Retrieving whatWQPdata for state %s", region.state_id)
    try:
        res = timed_call(api.fetch_site_inventory, names, statecode=region.state_id)
    except Exception as e:
        log.warning("State call failed (%s), calling by 1/2 of counties at a time.", e)
        res = _split(api, region, names, region.county_codes, SPLIT_DEPTH, e)

    log.info("Retrieved %d rows of data in %d seconds.", res.nrow, math.ceil(res.time))
    return InventoryPull(out=res.out, time=res.time, nrow=res.nrow)


def combine_inventory(inventories: Iterable[pd.DataFrame], out_file: Optional[str] = None) -> pd.DataFrame:
    """
    Stack per-state inventories and keep the columns of interest.

    lat/lon are kept (as latitude/longitude) so sites can be mapped before
    any data is pulled. Writes a feather file when out_file is given.
    """
    frames = [df for df in inventories if len(df.columns)]
    dat_out = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
    dat_out = dat_out.rename(columns={"lat": "latitude", "lon": "longitude"})
    for col in INVENTORY_COLUMNS:
        if col not in dat_out.columns:
            dat_out[col] = pd.NA
    dat_out = dat_out[INVENTORY_COLUMNS].reset_index(drop=True)
    dat_out["resultCount"] = dat_out["resultCount"].fillna(0).astype("int64")

    if out_file:
        write_table(dat_out, out_file)
    return dat_out


def summarize_wqp_inventory(inventory: pd.DataFrame, out_file: str) -> pd.DataFrame:
    """One-row CSV: number of sites and number of records on offer."""
    summary = pd.DataFrame({
        "n_sites": [len(inventory)],
        "n_records": [int(inventory["resultCount"].sum())],
    })
    _ensure_folder(out_file)
    summary.to_csv(out_file, index=False)
    return summary


def write_table(df: pd.DataFrame, out_file: str) -> None:
    """Overwrite out_file with df in feather format."""
    _ensure_folder(out_file)
    df.reset_index(drop=True).to_feather(out_file)
    log.info("Wrote %d rows to %s", len(df), out_file)


def read_table(in_file: str) -> pd.DataFrame:
    return pd.read_feather(in_file)


def _ensure_folder(path: str) -> None:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
