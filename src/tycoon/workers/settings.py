"""arq worker settings module.

Import path for arq CLI: arq tycoon.workers.settings.WorkerSettings
"""

from __future__ import annotations

from arq import cron
from arq.connections import RedisSettings

from tycoon.config import get_settings
from tycoon.workers.jobs import (
    open_darkweb_event,
    refresh_accounts,
    reset_heist,
    run_shadow,
    tick_market,
    worker_shutdown,
    worker_startup,
)

EVERY_FIVE_MINUTES = set(range(0, 60, 5))


class WorkerSettings:
    """arq worker settings for the game scheduler."""

    functions = [reset_heist, tick_market, refresh_accounts, run_shadow, open_darkweb_event]
    cron_jobs = [
        cron(reset_heist, second=0),
        cron(tick_market, second=30),
        cron(refresh_accounts, minute=EVERY_FIVE_MINUTES, second=15),
        cron(run_shadow, minute=7, second=0),
        cron(open_darkweb_event, minute=3, second=0),
    ]
    redis_settings = RedisSettings.from_dsn(get_settings().redis_url)
    on_startup = worker_startup
    on_shutdown = worker_shutdown
    max_jobs = 4
    job_timeout = 300
    allow_abort_jobs = True
