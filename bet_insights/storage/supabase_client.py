# bet_insights/storage/supabase_client.py
from typing import Any, Dict, List, Optional, Type, TypeVar

from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from pydantic import BaseModel, ValidationError
from supabase import AsyncClient, create_async_client

from bet_insights.config.settings import settings
from bet_insights.models.bet import CombinedBet, FinishedBet
from bet_insights.models.enums import BetResult
from bet_insights.models.statistics import Wallet

BETS_TABLE = "bets"
COMBINED_BETS_TABLE = "combined_bets"
WALLETS_TABLE = "wallets"
# Legs come back embedded under 'items', which is the alias CombinedBet reads
COMBINED_BETS_SELECT = "*, items:combined_bet_items(*)"

ModelT = TypeVar("ModelT", bound=BaseModel)

# Module-level storage for the async client instance
_async_supabase_client: Optional[AsyncClient] = None


class StorageError(Exception):
    """Raised when the bet or wallet store cannot be read."""

    pass


async def initialize_supabase() -> Optional[AsyncClient]:
    """Initializes the global ASYNC Supabase client and returns it."""
    global _async_supabase_client
    if _async_supabase_client:
        logger.debug("Async Supabase client already initialized.")
        return _async_supabase_client

    if not settings.supabase_url or not settings.supabase_key:
        logger.critical("Supabase URL or Key not configured in settings.")
        raise SystemExit("Supabase configuration missing.")

    logger.debug(f"Initializing Async Supabase client with URL: {settings.supabase_url}")
    try:
        client: AsyncClient = await create_async_client(
            settings.supabase_url, settings.supabase_key
        )
        _async_supabase_client = client
        logger.success("Async Supabase client initialized successfully.")
        return client
    except Exception as e:
        logger.exception(f"Failed to initialize Async Supabase client: {e}")
        return None


def _resolve_client(client: Optional[AsyncClient]) -> AsyncClient:
    client = client or _async_supabase_client
    if not client:
        logger.error("Async Supabase client accessed before initialization.")
        raise StorageError("Supabase client is not initialized.")
    return client


async def _execute(query, table_name: str) -> List[Dict[str, Any]]:
    try:
        response: APIResponse = await query.execute()
    except APIError as e:
        logger.error(f"Error reading from {table_name}: {e.message}")
        logger.debug(f"Full APIError details: {e}")
        raise StorageError(f"Could not read {table_name}: {e.message}") from e
    return response.data or []


def _parse_rows(rows: List[Dict[str, Any]], model: Type[ModelT], table_name: str) -> List[ModelT]:
    parsed = []
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            logger.error(f"Invalid row {row.get('id')} in {table_name}: {e}")
            raise StorageError(f"Invalid row {row.get('id')} in {table_name}") from e
    return parsed


async def fetch_finished_bets(
    wallet_id: str, client: Optional[AsyncClient] = None
) -> List[FinishedBet]:
    """Settled simple bets of a wallet (anything but pending)."""
    client = _resolve_client(client)
    query = (
        client.table(BETS_TABLE)
        .select("*")
        .eq("wallet_id", wallet_id)
        .neq("result", BetResult.PENDING.value)
    )
    rows = await _execute(query, BETS_TABLE)
    bets = _parse_rows(rows, FinishedBet, BETS_TABLE)
    logger.info(f"Fetched {len(bets)} finished bets for wallet {wallet_id}.")
    return bets


async def fetch_finished_combined_bets(
    wallet_id: str, client: Optional[AsyncClient] = None
) -> List[CombinedBet]:
    """Settled combined bets of a wallet, with their legs."""
    client = _resolve_client(client)
    query = (
        client.table(COMBINED_BETS_TABLE)
        .select(COMBINED_BETS_SELECT)
        .eq("wallet_id", wallet_id)
        .neq("result", BetResult.PENDING.value)
    )
    rows = await _execute(query, COMBINED_BETS_TABLE)
    combined = _parse_rows(rows, CombinedBet, COMBINED_BETS_TABLE)
    logger.info(f"Fetched {len(combined)} finished combined bets for wallet {wallet_id}.")
    return combined


async def fetch_all_bets(
    wallet_id: str, client: Optional[AsyncClient] = None
) -> List[FinishedBet]:
    """Every simple bet of a wallet, pending included, newest match first."""
    client = _resolve_client(client)
    query = (
        client.table(BETS_TABLE)
        .select("*")
        .eq("wallet_id", wallet_id)
        .order("match_date", desc=True)
    )
    rows = await _execute(query, BETS_TABLE)
    return _parse_rows(rows, FinishedBet, BETS_TABLE)


async def fetch_all_combined_bets(
    wallet_id: str, client: Optional[AsyncClient] = None
) -> List[CombinedBet]:
    client = _resolve_client(client)
    query = (
        client.table(COMBINED_BETS_TABLE)
        .select(COMBINED_BETS_SELECT)
        .eq("wallet_id", wallet_id)
        .order("match_date", desc=True)
    )
    rows = await _execute(query, COMBINED_BETS_TABLE)
    return _parse_rows(rows, CombinedBet, COMBINED_BETS_TABLE)


async def fetch_wallet(
    wallet_id: str, client: Optional[AsyncClient] = None
) -> Optional[Wallet]:
    client = _resolve_client(client)
    query = client.table(WALLETS_TABLE).select("*").eq("id", wallet_id).limit(1)
    rows = await _execute(query, WALLETS_TABLE)
    if not rows:
        logger.warning(f"Wallet {wallet_id} not found.")
        return None
    return _parse_rows(rows, Wallet, WALLETS_TABLE)[0]
