"""Meeting-equity MCP server, FastMCP v2 implementation."""

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from .config import Config
from .coordinator import RecomputationCoordinator
from .holidays import HolidayGateway, NagerDateHolidayGateway, StaticHolidayGateway
from .store import StoreData, get_store_mtime, load_store

logger = logging.getLogger(__name__)


def build_gateway(config: Config, store: StoreData) -> HolidayGateway:
    """Pick the holiday source named by the config."""
    if config.holiday_source == "nager":
        return NagerDateHolidayGateway(
            config.holiday_api_base,
            timeout=config.holiday_timeout,
            retries=config.holiday_retries,
            cache_ttl=config.holiday_cache_ttl,
        )
    return StaticHolidayGateway(store.holidays)


# ---------------------------------------------------------------------------
# Lifespan: load the snapshot, set up the holiday gateway and coordinator
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(server: FastMCP):
    config = Config()
    store = load_store(config.store_path)
    mtime = get_store_mtime(config.store_path)
    gateway = build_gateway(config, store)
    coordinator = RecomputationCoordinator(
        gateway, debounce_seconds=config.recompute_debounce
    )
    logger.info(
        "Loaded %d participants, %d meetings, %d working-hours overrides (holidays: %s)",
        len(store.participants),
        len(store.meetings),
        len(store.working_hours),
        config.holiday_source,
    )
    try:
        yield {
            "store": store,
            "gateway": gateway,
            "coordinator": coordinator,
            "config": config,
            "store_mtime": mtime,
        }
    finally:
        await coordinator.close()
        if isinstance(gateway, NagerDateHolidayGateway):
            await gateway.aclose()


# ---------------------------------------------------------------------------
# Server instance
# ---------------------------------------------------------------------------

mcp = FastMCP("meeting-equity", lifespan=lifespan)

# Importing tool modules triggers @mcp.tool() registration
from meeting_equity_mcp.tools import equity_ops  # noqa: E402, F401

# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    config = Config()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run()
