"""
Partition calls to WQP based on the number of records available per site
and a number of records that makes a reasonable single call.

An atomic group is a site: its observations can't be reasonably split over
several WQP pulls, so every site lands in exactly one partition. Partitions
are balanced with an old but fairly effective heuristic: fix the number of
partitions, sort the sites by descending size, then go down the list adding
each site to the partition that's currently smallest. The balance is
approximate; it is not an exact bin packing.
"""

from __future__ import annotations

import heapq
import math
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd

from src.wqp_pull.errors import PartitionUnderProvisionedError
from src.wqp_pull.inventory import read_table, write_table
from src.utils.config import PartitionConfig, PullParams
from src.utils.pull_logger import get_logger

log = get_logger("partition")

# these organization ids make WQP answer "request failed [400]"
BAD_ORG_PATTERN = r"\s|\.|/"

PARTITION_COLUMNS = ["MonitoringLocationIdentifier", "SiteNumObs", "PullTask", "PullDate"]


def filter_inventory(inventory: pd.DataFrame, drop_location_types: Iterable[str] = ()) -> pd.DataFrame:
    """Drop site types that are not of interest and sites of organizations WQP can't be queried by."""
    drop_location_types = list(drop_location_types)
    keep = ~inventory["ResolvedMonitoringLocationTypeName"].isin(drop_location_types)
    inventory = inventory[keep]

    orgs = inventory["OrganizationIdentifier"].astype(str)
    bad = orgs.str.contains(BAD_ORG_PATTERN, regex=True)
    if bad.any():
        log.warning(
            "**dropping %d sites and %d results due to bad organization ids",
            int(bad.sum()), int(inventory.loc[bad, "resultCount"].sum()),
        )
    return inventory[~bad]


def atomic_groups(inventory: pd.DataFrame) -> pd.DataFrame:
    """
    One row per site, largest first.

    Every row of a site is summed, identical rows included, so a site never
    appears twice. The sort is stable so equal counts keep their inventory
    order.
    """
    sites = inventory
    if sites["MonitoringLocationIdentifier"].duplicated().any():
        sites = (
            sites.groupby("MonitoringLocationIdentifier", sort=False, as_index=False)["resultCount"]
            .sum()
        )
    sites = sites[["MonitoringLocationIdentifier", "resultCount"]]
    return sites.sort_values("resultCount", ascending=False, kind="mergesort").reset_index(drop=True)


def count_partitions(result_counts: Sequence[int], partition_cfg: PartitionConfig) -> int:
    """
    How many partitions the pull needs.

    (A) every site with at least target_pull_size results gets its own
    partition, plus (B) enough partitions for the remaining sites under
    both the results cap and the sites cap. Never less than one.
    """
    counts = np.asarray(result_counts, dtype="int64")
    target_pull_size = partition_cfg.target_pull_size

    n_single = int((counts >= target_pull_size).sum())
    small = counts[counts < target_pull_size]
    n_multi_byresult = math.ceil(int(small.sum()) / target_pull_size)
    # sites cap, not rounded until compared
    n_multi_bysite = len(small) / partition_cfg.target_inv_size
    n_multi = math.ceil(max(n_multi_byresult, n_multi_bysite))

    return max(1, n_single + n_multi)


def assign_partitions(result_counts: Sequence[int], num_partitions: int, target_inv_size: int) -> List[int]:
    """
    Partition index (1-based) for each count, in order.

    Counts are expected largest first. Each goes to the partition with the
    smallest running total among those still under target_inv_size sites,
    ties to the lowest index. Full partitions leave the heap for good.
    """
    heap = [(0, i) for i in range(1, num_partitions + 1)]
    site_sizes = [0] * (num_partitions + 1)
    assignments = []

    for n, size_i in enumerate(result_counts):
        if not heap:
            raise PartitionUnderProvisionedError(
                f"all {num_partitions} partitions hold {target_inv_size} sites "
                f"with {len(result_counts) - n} sites left to assign"
            )
        total, smallest = heapq.heappop(heap)
        assignments.append(smallest)
        site_sizes[smallest] += 1
        if site_sizes[smallest] < target_inv_size:
            heapq.heappush(heap, (total + int(size_i), smallest))

    return assignments


def partition_inventory(
                        inventory: pd.DataFrame,
                        partition_cfg: PartitionConfig,
                        pull_date: str,
                        drop_location_types: Iterable[str] = (),
                        ) -> pd.DataFrame:
    """
    Assign every retained site to one pull task.

    Returns:
        One row per site, largest first: MonitoringLocationIdentifier,
        SiteNumObs (the site's results), PullTask (``<pull_date>_<NNNN>``,
        which becomes the core of the pull's file name) and PullDate.
    """
    groups = atomic_groups(filter_inventory(inventory, drop_location_types))
    counts = groups["resultCount"].tolist()

    num_partitions = count_partitions(counts, partition_cfg)
    assignments = assign_partitions(counts, num_partitions, partition_cfg.target_inv_size)
    log.info("Partitioned %d sites and %d results into %d pulls", len(counts), sum(counts), num_partitions)

    return pd.DataFrame({
        "MonitoringLocationIdentifier": groups["MonitoringLocationIdentifier"],
        "SiteNumObs": groups["resultCount"].astype("int64"),
        "PullTask": [f"{pull_date}_{a:04d}" for a in assignments],
        "PullDate": pull_date,
    }, columns=PARTITION_COLUMNS)


def partition_wqp_inventory(
                            partitions_file: str,
                            inventory_file: str,
                            pull_params: PullParams,
                            partition_cfg: PartitionConfig,
                            pull_date: str,
                            ) -> pd.DataFrame:
    """Read the inventory, partition it and overwrite partitions_file with the result."""
    partitions = partition_inventory(
        read_table(inventory_file),
        partition_cfg,
        pull_date,
        drop_location_types=pull_params.drop_location_types,
    )
    write_table(partitions, partitions_file)
    return partitions


def summarize_partitions(partitions: pd.DataFrame) -> pd.DataFrame:
    """Sites and results per pull task."""
    return (
        partitions.groupby("PullTask", as_index=False)
        .agg(n_sites=("MonitoringLocationIdentifier", "size"), n_records=("SiteNumObs", "sum"))
        .sort_values("PullTask")
        .reset_index(drop=True)
    )
