"""Abstract class"""


from __future__ import annotations

import abc
import time
from typing import List, Optional, Sequence
import pandas as pd
import requests

from src.wqp_api.support_functions.support_functions import (
    Pacer,
    make_session
)
from src.wqp_pull.errors import WQPQueryError


class WaterQualityDataAPI(abc.ABC):
    """Remote source of site inventories and the state/county codes that scope them"""
    def __init__(self, name: str, min_interval_sec: float = 0.0, timeout: float = 300):
        self.name = name
        self.timeout = timeout
        self.session = make_session()
        self.pacer = Pacer(min_interval_sec=min_interval_sec)

    @abc.abstractmethod
    def fetch_site_inventory(
                            self,
                            characteristic_names: Sequence[str],
                            statecode: Optional[str] = None,
                            countycode: Optional[Sequence[str]] = None,
                            ) -> pd.DataFrame:
        """Return one row per site with its resultCount for the given characteristics."""

    @abc.abstractmethod
    def fetch_state_codes(self) -> List[str]:
        """Return the state codes (US:NN) known to the source."""

    @abc.abstractmethod
    def fetch_county_codes(self, state_id: str) -> List[str]:
        """Return the county codes (US:NN:CCC) of one state."""

    def _get(self, url: str, **kwargs) -> requests.Response:
        self.pacer.wait()
        try:
            r = self.session.get(url, timeout=self.timeout, **kwargs)
            if r.status_code == 429:
                # exponential backoff with jitter
                for i in range(5):
                    time.sleep((2 ** i) + (0.1 * i))
                    self.pacer.wait()
                    r = self.session.get(url, timeout=self.timeout, **kwargs)
                    if r.ok:
                        break
            r.raise_for_status()
        except requests.RequestException as e:
            raise WQPQueryError(f"{self.name}: GET {url} failed: {e}") from e
        return r
