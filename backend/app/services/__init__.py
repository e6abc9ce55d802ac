# backend/app/services/__init__.py
from .revision_behavior_service import RevisionBehaviorService
