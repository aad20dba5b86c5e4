"""
Water Quality Portal access
=======================================================

* Remote side of the inventory pull: one client per data source, all
  sharing the same shape (`WaterQualityDataAPI`).
* The site inventory ("what data") is a per-site summary: one row per
  monitoring location with the number of results available for the
  requested characteristicNames, without pulling the results themselves.
* Robust engineering: pooled session with retries on 5xx, exponential
  backoff on 429, optional rate-limit pacing, every failure surfaced as
  `WQPQueryError`.

* Stacks
------
    1) WQP Station search (geojson) - site inventory by state or county list
    2) WQP Codes service - state codes and county codes per state
"""
