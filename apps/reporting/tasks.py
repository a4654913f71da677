"""
Celery tasks for the daily sales summary.
"""

import logging

from celery import shared_task

from apps.core.utils import local_today

from .services import DailySalesSummaryService, yesterday_and_today

logger = logging.getLogger(__name__)


@shared_task(
    name="apps.reporting.tasks.rebuild_daily_sales_summaries",
    bind=True,
    max_retries=3,
    default_retry_delay=300,  # 5 minutes
)
def rebuild_daily_sales_summaries(self) -> str:
    """
    Rebuild yesterday's and today's summaries for every user with activity.

    Runs nightly from the beat schedule so late refunds and write-offs are
    reflected even when a request-time rebuild was missed.

    Returns:
        str: Summary of rebuilt rows
    """
    try:
        start_day, end_day = yesterday_and_today(local_today())
        user_ids = DailySalesSummaryService.active_user_ids(start_day, end_day)

        rebuilt = 0
        failed = 0
        for user_id in user_ids:
            try:
                rebuilt += len(DailySalesSummaryService.rebuild_range(user_id, start_day, end_day))
            except Exception as e:
                logger.error(f"Failed to rebuild daily summary for {user_id}: {e}")
                failed += 1

        summary = (
            f"Rebuilt {rebuilt} daily summaries for {len(user_ids)} users "
            f"({start_day} to {end_day}), {failed} failed"
        )
        logger.info(summary)
        return summary

    except Exception as e:
        logger.exception(f"Error rebuilding daily summaries: {e}")
        raise self.retry(exc=e)
