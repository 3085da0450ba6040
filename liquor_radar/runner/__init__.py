"""Scheduling of search passes for one or many users."""

from liquor_radar.runner.orchestrator import SearchOrchestrator
from liquor_radar.runner.subscriber import SubscriberRunner

__all__ = ["SearchOrchestrator", "SubscriberRunner"]
