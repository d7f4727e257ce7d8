"""
Service context extraction for multi-process logging.

Every API process runs its own scheduler loops, so log lines carry the
process identity to tell apart which worker held a job lock.
"""

import os
import socket
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'ticket-sales')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostname is unique per replica; fall back to PID locally
    hostname = os.getenv('HOSTNAME') or socket.gethostname()
    worker = f'{hostname[:12]}-{os.getpid()}' if deploy_env != 'local_dev' else str(os.getpid())

    return f'{service_name}@{deploy_env}:{worker}'
