from prometheus_client import Counter, Histogram


class TicketingMetrics:
    """
    Ticket sales pipeline metrics

    Tracks inventory reservations, expiry sweeps, webhook outcomes, payout
    settlement and background job runs per process.
    """

    def __init__(self):
        # ========== Inventory Metrics ==========
        self.ticket_reservations = Counter(
            'ticket_reservations_total',
            'Ticket reservation attempts',
            ['fare_class', 'result'],  # result: reserved/insufficient_stock/not_found
        )

        self.tickets_expired = Counter(
            'tickets_expired_total',
            'Pending tickets expired by the sweep (inventory returned)',
        )

        # ========== Payment Metrics ==========
        self.webhook_notifications = Counter(
            'payment_webhook_notifications_total',
            'Payment webhook notifications by outcome',
            ['outcome'],
        )

        self.payouts_settled = Counter(
            'payouts_settled_total',
            'Payout settlement attempts',
            ['result'],  # result: paid/error
        )

        # ========== Scheduler Metrics ==========
        self.scheduler_job_runs = Counter(
            'scheduler_job_runs_total',
            'Scheduled job ticks by outcome',
            ['job', 'outcome'],  # outcome: completed/skipped/failed
        )

        self.scheduler_job_duration = Histogram(
            'scheduler_job_duration_seconds',
            'Scheduled job run time while holding the lock',
            ['job'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 60.0, 300.0],
        )

    # ========== Helper Methods ==========

    def record_reservation(self, *, fare_class: str, result: str, quantity: int = 1):
        self.ticket_reservations.labels(fare_class=fare_class, result=result).inc(quantity)

    def record_tickets_expired(self, *, count: int):
        if count:
            self.tickets_expired.inc(count)

    def record_webhook_outcome(self, *, outcome: str):
        self.webhook_notifications.labels(outcome=outcome).inc()

    def record_payout(self, *, result: str):
        self.payouts_settled.labels(result=result).inc()

    def record_job_run(self, *, job: str, outcome: str, duration: float | None = None):
        self.scheduler_job_runs.labels(job=job, outcome=outcome).inc()
        if duration is not None:
            self.scheduler_job_duration.labels(job=job).observe(duration)


# Global metrics instance
metrics = TicketingMetrics()
