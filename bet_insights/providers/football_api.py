# bet_insights/providers/football_api.py

from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from bet_insights.config.settings import settings
from bet_insights.models.match import Match
from bet_insights.models.suggestion import RateLimitInfo
from bet_insights.normalization.normalizer import normalize_matches
from bet_insights.utils.cache import ResponseCache
from bet_insights.utils.misc_utils import build_cache_key
from .base_provider import BaseProvider, MalformedResponseError, ProviderError

# Competitions offered as quick filters; ids are API-Football league ids
MAIN_LEAGUES = [
    {"id": 71, "name": "Brasileirão Série A", "country": "Brazil"},
    {"id": 72, "name": "Brasileirão Série B", "country": "Brazil"},
    {"id": 73, "name": "Copa do Brasil", "country": "Brazil"},
    {"id": 39, "name": "Premier League", "country": "England"},
    {"id": 140, "name": "La Liga", "country": "Spain"},
    {"id": 135, "name": "Serie A", "country": "Italy"},
    {"id": 78, "name": "Bundesliga", "country": "Germany"},
    {"id": 61, "name": "Ligue 1", "country": "France"},
    {"id": 2, "name": "Champions League", "country": "World"},
    {"id": 3, "name": "Europa League", "country": "World"},
    {"id": 13, "name": "Libertadores", "country": "World"},
    {"id": 11, "name": "Copa Sudamericana", "country": "World"},
]


def _header_int(headers: httpx.Headers, name: str) -> Optional[int]:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class FootballApiProvider(BaseProvider):
    """Match provider backed by API-Football v3."""

    name: str = "api-football"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[ResponseCache] = None,
        ttl_fixtures: Optional[int] = None,
        ttl_live: Optional[int] = None,
        ttl_static: Optional[int] = None,
    ):
        super().__init__(client=client, cache=cache, timeout=settings.request_timeout)

        api_key = api_key or settings.football_api_key
        if not api_key:
            logger.error("API-Football key is not set in environment variables.")
            raise ProviderError("Missing API-Football key configuration.")

        self.base_url = (base_url or settings.football_api_base_url).rstrip("/")
        self.ttl_fixtures = settings.cache_ttl_fixtures if ttl_fixtures is None else ttl_fixtures
        self.ttl_live = settings.cache_ttl_live if ttl_live is None else ttl_live
        self.ttl_static = settings.cache_ttl_static if ttl_static is None else ttl_static
        self.rate_limit: Optional[RateLimitInfo] = None

        self.client.headers.update({"x-apisports-key": api_key})
        logger.info("FootballApiProvider initialized with API key header.")

    async def _get(
        self, endpoint: str, params: Dict[str, Any], ttl: int
    ) -> List[Dict[str, Any]]:
        """GETs an endpoint and returns its 'response' list, going through the cache."""
        cache_key = build_cache_key(endpoint, params)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {cache_key}")
            return cached

        try:
            response = await self._make_request(
                method="GET", url=f"{self.base_url}{endpoint}", params=params
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"Request to {endpoint} failed: {e}") from e

        self.rate_limit = RateLimitInfo(
            requests_remaining=_header_int(
                response.headers, "x-ratelimit-requests-remaining"
            ),
            requests_limit=_header_int(response.headers, "x-ratelimit-requests-limit"),
        )

        try:
            payload = response.json()
        except ValueError as e:
            logger.debug(f"Raw response content: {response.text[:500]}")
            raise MalformedResponseError(f"Invalid JSON from {endpoint}") from e

        if not isinstance(payload, dict):
            raise MalformedResponseError(f"Unexpected payload type from {endpoint}")

        # API-Football reports quota/parameter problems with HTTP 200 and an 'errors' field
        errors = payload.get("errors")
        if errors:
            message = (
                ", ".join(str(e) for e in errors)
                if isinstance(errors, list)
                else ", ".join(str(v) for v in errors.values())
                if isinstance(errors, dict)
                else str(errors)
            )
            logger.error(f"API-Football error for {endpoint}: {message}")
            raise ProviderError(f"API-Football error: {message}")

        data = payload.get("response")
        if not isinstance(data, list):
            raise MalformedResponseError(f"Missing 'response' list from {endpoint}")

        self.cache.set(cache_key, data, ttl)
        return data

    async def list_matches_for_date(
        self, match_date: date, league_id: Optional[int] = None
    ) -> List[Match]:
        """All fixtures on a day, ordered by kickoff."""
        params: Dict[str, Any] = {"date": match_date.isoformat()}
        if league_id:
            params["league"] = league_id
        raw = await self._get("/fixtures", params, self.ttl_fixtures)
        matches = sorted(normalize_matches(raw), key=lambda m: m.kickoff_utc)
        logger.info(f"Fetched {len(matches)} fixtures for {match_date.isoformat()}")
        return matches

    async def list_live_matches(self) -> List[Match]:
        raw = await self._get("/fixtures", {"live": "all"}, self.ttl_live)
        return normalize_matches(raw)

    async def get_match(self, match_id: int) -> Optional[Match]:
        raw = await self._get("/fixtures", {"id": match_id}, self.ttl_fixtures)
        matches = normalize_matches(raw)
        return matches[0] if matches else None

    async def list_recent_matches(self, team_id: int, count: int = 5) -> List[Match]:
        """A team's last `count` fixtures, in the order the provider returns them."""
        raw = await self._get(
            "/fixtures", {"team": team_id, "last": count}, self.ttl_static
        )
        return normalize_matches(raw)

    async def list_head_to_head(
        self, team_a_id: int, team_b_id: int, count: int = 5
    ) -> List[Match]:
        raw = await self._get(
            "/fixtures/headtohead",
            {"h2h": f"{team_a_id}-{team_b_id}", "last": count},
            self.ttl_static,
        )
        return normalize_matches(raw)
