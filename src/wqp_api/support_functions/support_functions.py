"""Support functions for WQP requests"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence, Tuple, TypeVar

import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


T = TypeVar("T")

# WQP takes multi-valued parameters as one semicolon-separated string
WQP_VALUE_SEP = ";"


class Pacer:
    """Simple rate pacer: ensures a minimum delay between requests."""
    def __init__(self, min_interval_sec: float = 0.0):
        self.min_interval = max(0.0, float(min_interval_sec))
        self._last = 0.0

    def wait(self):
        """Wait between request"""
        if self.min_interval <= 0:
            return
        sleep_for = self.min_interval - (time.time() - self._last)
        if sleep_for > 0:
            time.sleep(sleep_for)
        self._last = time.time()


def make_session(
                total_retries: int = 5,
                backoff: float = 0.6
                ) -> requests.Session:
    """Make request session"""
    s = requests.Session()
    retry = Retry(
        total=total_retries,
        connect=total_retries,
        read=total_retries,
        status=total_retries,
        backoff_factor=backoff,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=4, pool_maxsize=4)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    return s


def join_values(values: Sequence[str]) -> str:
    """Join multi-valued query parameters the way WQP expects them."""
    return WQP_VALUE_SEP.join(str(v) for v in values)


def split_in_half(codes: Sequence[T]) -> Tuple[List[T], List[T]]:
    """
    Split into two contiguous halves by count; the first half gets the extra
    element when the length is odd.
    """
    split = math.ceil(len(codes) / 2)
    return list(codes[:split]), list(codes[split:])


@dataclass(frozen=True)
class TimedFrame:
    """A query result with the wall-clock seconds it took."""
    time: float
    nrow: int
    out: pd.DataFrame


def timed_call(fun: Callable[..., pd.DataFrame], *args: Any, **kwargs: Any) -> TimedFrame:
    """Call fun and keep track of how long it took and how many rows came back."""
    start = time.perf_counter()
    out = fun(*args, **kwargs)
    return TimedFrame(time=time.perf_counter() - start, nrow=len(out), out=out)
