"""Background job processing with ARQ.

The worker runs the periodic storage cleanups. Start it with:
    arq leaselink.core.jobs.worker.WorkerSettings
"""
