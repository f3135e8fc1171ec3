"""swapcycle — entry point: load config, connect, run the scheduler."""

import signal
import sys

from config.settings import AgentConfig, ConfigError
from swapcycle.accounts import load_accounts
from swapcycle.cycle import Asset, build_swap_cycle
from swapcycle.executor import SwapExecutor
from swapcycle.ledger import LedgerConnectionError, Web3LedgerClient, connect
from swapcycle.logger import print_banner, setup_logger
from swapcycle.pacing import DelayPolicy
from swapcycle.scheduler import Scheduler


def build_scheduler(cfg: AgentConfig, ledger, logger) -> Scheduler:
    """Wire the account pool, swap cycle and executor for one configuration."""
    accounts = load_accounts(cfg.private_keys)
    assets = {symbol: Asset.from_config(a) for symbol, a in cfg.assets.items()}
    cycle = build_swap_cycle(assets)
    executor = SwapExecutor(ledger, cfg.router_address, cfg.swap, logger)
    print_banner(accounts, cycle)
    return Scheduler(
        accounts=accounts,
        cycle=cycle,
        executor=executor,
        delay_policy=DelayPolicy.from_config(cfg.delay),
        logger=logger,
    )


def main() -> int:
    try:
        cfg = AgentConfig.from_env()
    except ConfigError as e:
        setup_logger().error(f"Configuration error: {e}")
        return 2

    logger = setup_logger(log_dir=cfg.log_dir)
    try:
        w3 = connect(cfg.rpc_url, logger=logger)
        scheduler = build_scheduler(cfg, Web3LedgerClient(w3, cfg.swap), logger)
    except (ConfigError, LedgerConnectionError) as e:
        logger.error(f"Startup failed: {e}")
        return 2

    def shutdown(signum, frame):
        logger.info("Shutting down swapcycle...")
        scheduler.stop()

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)

    logger.info(f"Automation bot started with {len(scheduler.accounts)} wallet(s).")
    try:
        scheduler.run()
    except Exception:
        logger.exception("A critical error occurred")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
