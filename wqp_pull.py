"""
WQP pull cycle: inventory every state, then partition the inventory into
right-sized pull tasks.

Settings come from the environment (or .env), see src/utils/config.py.

    python wqp_pull.py

Writes to WQP_OUTPUT_FOLDER:
    wqp_inventory.feather      one row per site with its resultCount
    wqp_inventory_summary.csv  n_sites, n_records
    wqp_partitions.feather     one row per site with its PullTask
    wqp_partitions_summary.csv sites and results per PullTask
"""

import os

from src.wqp_api.api_wqp import WQPSiteInventoryAPI
from src.wqp_pull.inventory import (
    combine_inventory,
    get_states,
    inventory_wqp,
    summarize_wqp_inventory,
)
from src.wqp_pull.partition import partition_wqp_inventory, summarize_partitions
from src.utils.config import load_config, load_pull_params
from src.utils.pull_logger import configure_logger, pullLogger


def main() -> None:
    cfg = load_config()
    configure_logger(level=cfg.log_level)
    pull_params = load_pull_params(cfg.pull_params_file)

    api = WQPSiteInventoryAPI(base_url=cfg.wqp_base_url, min_interval_sec=cfg.min_interval_sec)

    inventories = [inventory_wqp(region, pull_params, api).out for region in get_states(api)]
    inventory = combine_inventory(inventories, out_file=cfg.inventory_file)
    summarize_wqp_inventory(inventory, os.path.join(cfg.output_folder, "wqp_inventory_summary.csv"))

    partitions = partition_wqp_inventory(
        cfg.partitions_file,
        cfg.inventory_file,
        pull_params,
        cfg.partition,
        cfg.pull_date,
    )
    summary = summarize_partitions(partitions)
    summary.to_csv(os.path.join(cfg.output_folder, "wqp_partitions_summary.csv"), index=False)
    pullLogger.info("Done: %d sites in %d pull tasks", len(partitions), len(summary))


if __name__ == "__main__":
    main()
