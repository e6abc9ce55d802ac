# This file makes the 'models' directory a Python package.

from .event import InteractionLog
