"""Current and historical price sources"""

import math
import logging
from typing import Dict, List, Optional

from autofolio_config import PriceConfig, get_config
from autofolio_core import HistoricalPriceSource, PriceSource, PriceSourceError
from .http import request_json
from .price_cache import TTLCache


def _parse_price(value) -> Optional[float]:
    """Jupiter returns prices as strings; anything non-positive is unusable"""
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(price) or math.isinf(price) or price <= 0:
        return None
    return price


class JupiterPriceSource(PriceSource):
    """Current USD prices from the Jupiter price API, keyed by asset symbol"""

    def __init__(self, config: Optional[PriceConfig] = None, cache: Optional[TTLCache] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or get_config().prices
        self.logger = logger or logging.getLogger(__name__)
        self._cache = cache if cache is not None else TTLCache(self.config.price_cache_ttl_seconds)

    async def get_prices(self, assets: List[str]) -> Dict[str, float]:
        """
        Get current prices, serving fresh cache entries first.

        Pegged stablecoins fall back to 1.0 when the API omits them.

        Raises:
            PriceSourceError: unknown asset, API failure or missing price
        """
        prices = {}
        assets_to_fetch = []

        for asset in dict.fromkeys(assets):
            cached = self._cache.get(asset)
            if cached is not None:
                prices[asset] = cached
                self.logger.debug(f"Using cached price for {asset}")
            else:
                assets_to_fetch.append(asset)

        if not assets_to_fetch:
            self.logger.debug(f"All {len(prices)} prices retrieved from cache")
            return prices

        pegged = set(self.config.pegged_assets)
        unknown = [a for a in assets_to_fetch if a not in self.config.token_mints and a not in pegged]
        if unknown:
            raise PriceSourceError(f"No token mint configured for: {', '.join(unknown)}")

        mints = {a: self.config.token_mints[a] for a in assets_to_fetch if a in self.config.token_mints}
        data = {}
        if mints:
            response = await request_json(
                'GET',
                self.config.jupiter_price_url,
                params={'ids': ','.join(mints.values())},
                timeout_seconds=self.config.request_timeout_seconds,
                max_retries=self.config.max_retries,
                retry_delay_seconds=self.config.retry_delay_seconds,
                error_cls=PriceSourceError,
                logger=self.logger
            )
            if not isinstance(response, dict):
                raise PriceSourceError("Jupiter price response must be a JSON object")
            data = response.get('data') or {}

        missing = []
        fetched = []
        for asset in assets_to_fetch:
            entry = data.get(mints[asset]) if asset in mints else None
            price = _parse_price(entry.get('price')) if isinstance(entry, dict) else None

            if price is None and asset in pegged:
                self.logger.warning(f"No price returned for {asset}, using pegged price $1.00")
                price = 1.0

            if price is None:
                missing.append(asset)
                continue

            prices[asset] = price
            self._cache.set(asset, price)
            fetched.append(f"{asset} -> ${price:,.4f}")

        if fetched:
            self.logger.info(f"Retrieved prices: {', '.join(fetched)}")

        if missing:
            self.logger.error(f"Price API returned no usable price for: {missing}")
            raise PriceSourceError(f"No price available for: {', '.join(missing)}")

        return prices


class CoinGeckoHistorySource(HistoricalPriceSource):
    """Daily USD closing prices from CoinGecko's market_chart endpoint"""

    def __init__(self, config: Optional[PriceConfig] = None, cache: Optional[TTLCache] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or get_config().prices
        self.logger = logger or logging.getLogger(__name__)
        self._cache = cache if cache is not None else TTLCache(self.config.history_cache_ttl_seconds)

    async def get_price_history(self, assets: List[str], days: int) -> Dict[str, List[float]]:
        """
        Get the last `days` daily prices per asset, oldest first.

        Every series ends on the latest day. Series can come back shorter than
        requested for young assets; BacktestService keeps the shared trailing
        window before simulating.

        Raises:
            PriceSourceError: unknown asset, API failure or malformed series
        """
        if days < 1:
            raise ValueError(f"days must be positive, got {days}")

        history = {}
        for asset in dict.fromkeys(assets):
            key = (asset, days)
            cached = self._cache.get(key)
            if cached is not None:
                self.logger.debug(f"Using cached history for {asset} ({len(cached)} days)")
                history[asset] = list(cached)
                continue

            series = await self._fetch_history(asset, days)
            self._cache.set(key, series)
            history[asset] = list(series)

        return history

    async def _fetch_history(self, asset: str, days: int) -> List[float]:
        coin_id = self.config.coingecko_ids.get(asset)

        if coin_id is None:
            if asset in self.config.pegged_assets:
                self.logger.info(f"No CoinGecko id for pegged asset {asset}, using flat $1.00 history")
                return [1.0] * days
            raise PriceSourceError(f"No CoinGecko id configured for {asset}")

        response = await request_json(
            'GET',
            f"{self.config.coingecko_url}/coins/{coin_id}/market_chart",
            params={'vs_currency': 'usd', 'days': str(days), 'interval': 'daily'},
            timeout_seconds=self.config.request_timeout_seconds,
            max_retries=self.config.max_retries,
            retry_delay_seconds=self.config.retry_delay_seconds,
            error_cls=PriceSourceError,
            logger=self.logger
        )

        points = response.get('prices') if isinstance(response, dict) else None
        if not isinstance(points, list):
            raise PriceSourceError(f"CoinGecko response for {asset} has no price list")

        series = []
        for point in points:
            price = _parse_price(point[1]) if isinstance(point, list) and len(point) == 2 else None
            if price is None:
                raise PriceSourceError(f"Malformed CoinGecko price point for {asset}: {point!r}")
            series.append(price)

        # market_chart includes the current price as an extra trailing point
        series = series[-days:]
        self.logger.info(f"Retrieved {len(series)} days of history for {asset}")
        return series
