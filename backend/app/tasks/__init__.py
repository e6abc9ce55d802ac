# This file makes the tasks directory a Python package
# Import all task modules to ensure they are registered with Celery

from . import db_tasks

# Explicitly import the tasks to register them
from .db_tasks import save_interaction_log_task

__all__ = [
    'save_interaction_log_task',
]
