"""Site inventories and state/county codes from the Water Quality Portal."""

import re
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from src.wqp_api.api_abstract import WaterQualityDataAPI
from src.wqp_api.support_functions.support_functions import join_values
from src.wqp_pull.errors import WQPQueryError
from src.utils.config import WQP_BASE_URL
from src.utils.pull_logger import get_logger

log = get_logger("wqp_api")

STATE_CODE = re.compile(r"^US:\d{2}$")


class WQPSiteInventoryAPI(WaterQualityDataAPI):
    """
    Water Quality Portal "what data" client.
    - Station search with mimeType=geojson: one feature per site, carrying
      resultCount for the requested characteristicNames
    - Codes service for states and their counties
    - Returns: pandas.DataFrame with the feature properties plus lat, lon
    """

    def __init__(
                    self,
                    base_url: str = WQP_BASE_URL,
                    name: str = "wqp",
                    min_interval_sec: float = 0.0,
                    timeout: float = 300,
                ):
        super().__init__(name=name, min_interval_sec=min_interval_sec, timeout=timeout)
        self.base_url = base_url.rstrip("/")

    @property
    def station_url(self) -> str:
        return f"{self.base_url}/data/Station/search"

    def codes_url(self, code_type: str) -> str:
        return f"{self.base_url}/Codes/{code_type}"

    # --------------------------------------------------------------------
    # Public API
    # --------------------------------------------------------------------
    def fetch_site_inventory(
                            self,
                            characteristic_names: Sequence[str],
                            statecode: Optional[str] = None,
                            countycode: Optional[Sequence[str]] = None,
                            ) -> pd.DataFrame:
        if (statecode is None) == (countycode is None):
            raise ValueError("Give exactly one of statecode or countycode")

        params: Dict[str, str] = {
            "characteristicName": join_values(characteristic_names),
            "mimeType": "geojson",
        }
        if statecode is not None:
            params["statecode"] = statecode
        else:
            params["countycode"] = join_values(countycode)

        log.debug("Station search %s", {k: v for k, v in params.items() if k != "characteristicName"})
        r = self._get(self.station_url, params=params)
        return self.features_to_frame(self._json(r))

    def fetch_state_codes(self) -> List[str]:
        r = self._get(self.codes_url("statecode"), params={"countrycode": "US", "mimeType": "json"})
        return [c for c in self._code_values(self._json(r)) if STATE_CODE.match(c)]

    def fetch_county_codes(self, state_id: str) -> List[str]:
        r = self._get(self.codes_url("countycode"), params={"statecode": state_id, "mimeType": "json"})
        prefix = f"{state_id}:"
        return [c for c in self._code_values(self._json(r)) if c.startswith(prefix)]

    # --------------------------------------------------------------------
    # Parsing
    # --------------------------------------------------------------------
    @staticmethod
    def features_to_frame(payload: Dict[str, Any]) -> pd.DataFrame:
        """Flatten a GeoJSON FeatureCollection into one row per site."""
        rows = []
        for feat in payload.get("features") or []:
            row = dict(feat.get("properties") or {})
            coords = (feat.get("geometry") or {}).get("coordinates") or [None, None]
            row["lon"], row["lat"] = coords[0], coords[1]
            rows.append(row)

        df = pd.DataFrame(rows)
        if df.empty:
            return pd.DataFrame(columns=["MonitoringLocationIdentifier", "resultCount", "lat", "lon"])
        if "resultCount" not in df.columns:
            df["resultCount"] = 0
        df["resultCount"] = pd.to_numeric(df["resultCount"], errors="coerce").fillna(0).astype("int64")
        return df

    @staticmethod
    def _code_values(payload: Dict[str, Any]) -> List[str]:
        return [str(c["value"]) for c in payload.get("codes") or [] if c.get("value")]

    def _json(self, r) -> Dict[str, Any]:
        try:
            return r.json()
        except ValueError as e:
            raise WQPQueryError(f"{self.name}: unreadable response from {r.url}") from e
