from rental_engine.infrastructure.scheduling.reconciliation_worker import ReconciliationWorker

__all__ = ["ReconciliationWorker"]
