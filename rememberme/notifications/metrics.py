from prometheus_client import Counter


scheduler_sweeps_total = Counter(
    "notification_scheduler_sweeps_total",
    "Total scheduler sweep cycles",
)

scheduler_sweeps_skipped_total = Counter(
    "notification_scheduler_sweeps_skipped_total",
    "Sweep ticks skipped because the previous one was still running",
)

notifications_delivered_total = Counter(
    "notifications_delivered_total",
    "Total reminders handed to the delivery backend",
)

notifications_failed_total = Counter(
    "notifications_failed_total",
    "Total reminders whose delivery failed",
)

notifications_skipped_total = Counter(
    "notifications_skipped_total",
    "Total due slots skipped (no content, repaired or vanished schedules)",
)

schedules_initialized_total = Counter(
    "notification_schedules_initialized_total",
    "Total schedule (re)initializations",
)
