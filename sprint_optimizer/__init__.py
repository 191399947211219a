"""
Sprint Optimizer

Greedy sprint assignment planning with burnout-aware workload rebalancing.
"""

__version__ = "1.0.0"

from .config import EngineSettings, Config

from .roster import (
    Task,
    Worker,
    TaskAssignment,
    BurnoutRiskLabel,
    InvalidInputError,
    parse_tasks,
    parse_workers,
    parse_assignments
)

from .planner import (
    AssignmentPlanner,
    AssignmentPlan,
    Strategy,
    generate_sprint_plans
)

from .evaluator import (
    PlanEvaluator,
    PlanEvaluation,
    evaluate_plan
)

from .burnout import (
    BurnoutRiskScorer,
    BurnoutSignal,
    AtRiskEntry,
    identify_at_risk,
    parse_signals,
    parse_at_risk_entries
)

from .rebalancer import (
    WorkloadRebalancer,
    Reassignment,
    RebalanceResult,
    rebalance_workload
)

from .contributions import (
    RollingLoadMetrics,
    compute_rolling_load_metrics,
    compute_weekly_load_buckets
)

__all__ = [
    # Version
    "__version__",

    # Configuration
    "EngineSettings",
    "Config",

    # Roster
    "Task",
    "Worker",
    "TaskAssignment",
    "BurnoutRiskLabel",
    "InvalidInputError",
    "parse_tasks",
    "parse_workers",
    "parse_assignments",

    # Planner
    "AssignmentPlanner",
    "AssignmentPlan",
    "Strategy",
    "generate_sprint_plans",

    # Evaluator
    "PlanEvaluator",
    "PlanEvaluation",
    "evaluate_plan",

    # Burnout
    "BurnoutRiskScorer",
    "BurnoutSignal",
    "AtRiskEntry",
    "identify_at_risk",
    "parse_signals",
    "parse_at_risk_entries",

    # Rebalancer
    "WorkloadRebalancer",
    "Reassignment",
    "RebalanceResult",
    "rebalance_workload",

    # Contributions
    "RollingLoadMetrics",
    "compute_rolling_load_metrics",
    "compute_weekly_load_buckets",
]
