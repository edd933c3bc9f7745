"""
Subsystem lifecycle: contract, abstract base and orchestrator.
"""

from hearthvale.core.lifecycle.base import BaseSubsystem
from hearthvale.core.lifecycle.contract import GameSubsystem
from hearthvale.core.lifecycle.orchestrator import SubsystemOrchestrator
from hearthvale.core.lifecycle.report import LifecycleFailure, LifecycleReport
from hearthvale.core.lifecycle.state import LifecyclePhase, OrchestratorState, SubsystemState

__all__ = [
    "BaseSubsystem",
    "GameSubsystem",
    "SubsystemOrchestrator",
    "LifecycleFailure",
    "LifecycleReport",
    "LifecyclePhase",
    "OrchestratorState",
    "SubsystemState",
]
