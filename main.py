import sys
import asyncio
from datetime import date
from typing import Optional

# --- Settings/Logging ---
from bet_insights.logging.setup import setup_logging
from bet_insights.config.settings import settings

setup_logging()

from loguru import logger

from bet_insights.calculation.history_aggregator import aggregate_history
from bet_insights.calculation.performance_stats import build_performance_report
from bet_insights.calculation.suggestion_ranker import (
    HIGH_CONFIDENCE_THRESHOLD,
    rank_suggestions,
)
from bet_insights.enrichment.enricher import MatchEnricher
from bet_insights.models.enums import BET_TYPE_LABELS
from bet_insights.models.statistics import PerformanceReport
from bet_insights.models.suggestion import SuggestionReport
from bet_insights.providers.base_provider import AuthenticationError, ProviderError
from bet_insights.providers.football_api import FootballApiProvider
from bet_insights.storage.supabase_client import (
    StorageError,
    fetch_all_bets,
    fetch_all_combined_bets,
    fetch_finished_bets,
    fetch_finished_combined_bets,
    fetch_wallet,
    initialize_supabase,
)
from bet_insights.utils.cache import TTLCache

from rich import print
from rich.panel import Panel
from rich.table import Table


async def run_suggestion_cycle(target_date: date, wallet_id: str) -> Optional[SuggestionReport]:
    """Loads the wallet history, enriches the day's fixtures and ranks suggestions."""
    logger.info(f"Starting suggestion cycle for {target_date.isoformat()}...")

    bets = await fetch_finished_bets(wallet_id)
    combined = await fetch_finished_combined_bets(wallet_id)
    history = aggregate_history(bets, combined)

    provider = FootballApiProvider(cache=TTLCache(max_entries=settings.cache_max_entries))
    try:
        try:
            matches = await provider.list_matches_for_date(target_date)
        except AuthenticationError as e:
            logger.critical(f"API-Football authentication error: {e} - Check the API key!")
            return None
        except ProviderError as e:
            logger.error(f"Could not load fixtures for {target_date.isoformat()}: {e}")
            return None

        enricher = MatchEnricher(provider)
        evidence = await enricher.refresh(
            target_date, matches, max_batches=settings.enrichment_max_batches
        )

        report = rank_suggestions(matches, history, evidence)
        report.provider_warnings = enricher.warnings
        report.provider_disabled = enricher.provider_disabled
        report.pending_enrichment = enricher.cycle.remaining(matches)
        if report.pending_enrichment:
            logger.info(
                f"{report.pending_enrichment} matches still await enrichment; "
                "they will be picked up on the next refresh."
            )
        report.rate_limit = enricher.rate_limit
        return report
    finally:
        await provider.close()


async def run_statistics(wallet_id: str) -> PerformanceReport:
    bets = await fetch_all_bets(wallet_id)
    combined = await fetch_all_combined_bets(wallet_id)
    wallet = await fetch_wallet(wallet_id)
    return build_performance_report(bets, combined, wallet=wallet)


def render_suggestions(report: SuggestionReport, target_date: date) -> None:
    if report.provider_disabled or report.provider_warnings:
        print(
            Panel(
                "\n".join(report.provider_warnings),
                title="[bold red]Match provider problems[/bold red]",
                border_style="red",
            )
        )

    if not report.suggestions:
        print(Panel("No suggestions available for this day.", title=target_date.isoformat()))
        return

    table = Table(title=f"Suggestions for {target_date.isoformat()}")
    table.add_column("Kickoff (UTC)")
    table.add_column("Match")
    table.add_column("League")
    table.add_column("Suggestion")
    table.add_column("Confidence", justify="right")
    table.add_column("Rationale")
    for s in report.suggestions:
        style = "bold green" if s.confidence >= HIGH_CONFIDENCE_THRESHOLD else None
        table.add_row(
            s.kickoff_utc.strftime("%H:%M") if s.kickoff_utc else "-",
            f"{s.home_team} vs {s.away_team}",
            s.league or "-",
            s.favored_team or BET_TYPE_LABELS[s.suggested_bet_type],
            f"{s.confidence}%",
            "\n".join(s.rationale),
            style=style,
        )
    print(table)

    summary = (
        f"{report.total_matches} matches, {report.suggested_matches} suggestions, "
        f"{report.high_confidence_matches} high confidence"
    )
    if report.pending_enrichment:
        summary += f"\n{report.pending_enrichment} matches not yet enriched with form and head-to-head data"
    if report.rate_limit and report.rate_limit.requests_remaining is not None:
        summary += (
            f"\nAPI requests remaining: {report.rate_limit.requests_remaining}"
            f"/{report.rate_limit.requests_limit}"
        )
    print(Panel(summary, title="Summary"))


def render_statistics(report: PerformanceReport) -> None:
    general = report.general
    lines = [
        f"Bets: {general.total_bets} ({general.wins}W / {general.losses}L / {general.pending} pending)",
        f"Win rate: {general.win_rate:.1f}%",
        f"Staked: {general.total_staked:.2f}  Returned: {general.total_return:.2f}  "
        f"Profit: {general.profit:+.2f}",
        f"ROI: {general.roi:.1f}%  ROI on capital: {general.roi_capital:.1f}%",
    ]
    if report.current_streak.result is not None:
        lines.append(
            f"Current streak: {report.current_streak.count} x {report.current_streak.result.value}"
        )
    if report.best_bet_type is not None:
        lines.append(
            f"Best bet type: {report.best_bet_type.label} ({report.best_bet_type.win_rate:.1f}%)"
        )
    if report.worst_bet_type is not None:
        lines.append(
            f"Worst bet type: {report.worst_bet_type.label} ({report.worst_bet_type.win_rate:.1f}%)"
        )
    print(Panel("\n".join(lines), title="Wallet performance"))


def _target_date_from_args() -> date:
    if len(sys.argv) > 1:
        try:
            return date.fromisoformat(sys.argv[1])
        except ValueError:
            raise SystemExit(f"Invalid date '{sys.argv[1]}', expected YYYY-MM-DD.")
    return date.today()


async def main() -> None:
    """Main entry point for the application."""
    logger.info("Starting Bet Insights - Suggestions and Wallet Performance")
    target_date = _target_date_from_args()

    if not settings.wallet_id:
        logger.critical("WALLET_ID is not configured. Exiting.")
        return

    supabase_client = await initialize_supabase()
    if not supabase_client:
        logger.critical("Failed to initialize Supabase client. Exiting.")
        return

    try:
        report = await run_suggestion_cycle(target_date, settings.wallet_id)
        if report is not None:
            render_suggestions(report, target_date)
        render_statistics(await run_statistics(settings.wallet_id))
    except StorageError as e:
        logger.error(f"Could not read bets from Supabase: {e}")
    except ProviderError as e:
        logger.error(f"Match provider failed: {e}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
