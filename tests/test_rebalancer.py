"""
Tests for the workload rebalancer.
"""

import copy

from sprint_optimizer.rebalancer import (
    WorkloadRebalancer,
    Reassignment,
    RebalanceResult,
    rebalance_workload
)
from sprint_optimizer.burnout import AtRiskEntry, BurnoutRiskScorer, BurnoutSignal
from sprint_optimizer.planner import AssignmentPlanner
from sprint_optimizer.evaluator import PlanEvaluator
from sprint_optimizer.roster import Task, Worker, TaskAssignment


def assign(task_id, worker_id, points=None) -> TaskAssignment:
    return TaskAssignment(
        task_id=task_id,
        task_name=f"Task {task_id}",
        assigned_to=worker_id,
        worker_name=str(worker_id).title(),
        points=points
    )


def flagged(worker_id, combined_risk=72.0, at_risk=True) -> AtRiskEntry:
    return AtRiskEntry(
        id=worker_id,
        name=str(worker_id).title(),
        combined_risk=combined_risk,
        load_ratio=0.0,
        current_load=0.0,
        capacity=50.0,
        external_score=0.0,
        at_risk=at_risk
    )


class TestWorkloadRebalancer:
    """Tests for WorkloadRebalancer class."""

    def test_two_heaviest_tasks_move(self):
        """Test only the two heaviest tasks are candidates and both fit."""
        rebalancer = WorkloadRebalancer()
        team = [
            Worker(id="hot", name="Hot", velocity=5),
            Worker(id="cool", name="Cool", velocity=5),
        ]
        assignments = [
            assign("t3", "hot", 3),
            assign("t8", "hot", 8),
            assign("t5", "hot", 5),
            assign("c1", "cool", 10),
        ]

        result = rebalancer.rebalance(assignments, [flagged("hot")], team)

        assert [r.task_id for r in result.reassignments] == ["t8", "t5"]
        assert all(r.from_worker == "hot" and r.to_worker == "cool" for r in result.reassignments)
        assert [r.points for r in result.reassignments] == [8, 5]

        owners = {a.task_id: a.assigned_to for a in result.updated_assignments}
        assert owners == {"t3": "hot", "t8": "cool", "t5": "cool", "c1": "cool"}
        assert result.updated_assignments[1].worker_name == "Cool"

    def test_reason_names_worker_and_risk(self):
        """Test the audit reason cites the at-risk worker and risk."""
        result = rebalance_workload(
            [assign("t1", "hot", 8)],
            [flagged("hot", combined_risk=64.0)],
            [Worker(id="hot", name="Hot", velocity=5), Worker(id="cool", name="Cool", velocity=5)]
        )

        assert result.reassignments[0].reason == "hot is at burnout risk (combinedRisk=64.0)"

    def test_receiver_capacity_respected(self):
        """Test a move that would overflow the receiver is skipped."""
        rebalancer = WorkloadRebalancer()
        team = [
            Worker(id="hot", name="Hot", velocity=5),
            Worker(id="small", name="Small", velocity=1),
        ]
        assignments = [assign("t8", "hot", 8), assign("t5", "hot", 5)]

        result = rebalancer.rebalance(assignments, [flagged("hot")], team)

        # capacity 10: 0 + 8 fits, 8 + 5 does not
        assert result.total_moved == 1
        assert result.reassignments[0].task_id == "t8"
        assert result.updated_assignments[1].assigned_to == "hot"

    def test_receiver_load_never_exceeds_capacity(self):
        """Test capacity safety across many moves."""
        rebalancer = WorkloadRebalancer()
        team = [Worker(id=f"hot{i}", name=f"Hot {i}", velocity=5) for i in range(4)]
        team += [Worker(id="r1", name="R1", velocity=2), Worker(id="r2", name="R2", velocity=3)]
        assignments = [assign(f"h{i}-{j}", f"hot{i}", 4 + j) for i in range(4) for j in range(3)]
        entries = [flagged(f"hot{i}", combined_risk=90 - i) for i in range(4)]
        capacity = {"r1": 20, "r2": 30}

        result = rebalancer.rebalance(assignments, entries, team)

        load = {"r1": 0, "r2": 0}
        for move in result.reassignments:
            assert load[move.to_worker] + move.points <= capacity[move.to_worker]
            load[move.to_worker] += move.points
        assert result.total_moved > 0

    def test_first_fit_in_static_order(self):
        """Test receivers are not re-ranked after a move."""
        rebalancer = WorkloadRebalancer()
        team = [
            Worker(id="hot", name="Hot", velocity=5),
            Worker(id="empty", name="Empty", velocity=5),
            Worker(id="roomy", name="Roomy", velocity=10),
        ]
        assignments = [
            assign("a", "hot", 20),
            assign("b", "hot", 20),
            assign("r", "roomy", 10),
        ]

        result = rebalancer.rebalance(assignments, [flagged("hot")], team)

        # empty (0/50) ranks ahead of roomy (10/100) and keeps its rank at 20/50
        assert [r.to_worker for r in result.reassignments] == ["empty", "empty"]

    def test_falls_through_to_next_receiver(self):
        """Test the next receiver is tried when the first lacks room."""
        rebalancer = WorkloadRebalancer()
        team = [
            Worker(id="hot", name="Hot", velocity=5),
            Worker(id="tiny", name="Tiny", velocity=1),
            Worker(id="big", name="Big", velocity=5),
        ]

        result = rebalancer.rebalance([assign("a", "hot", 20)], [flagged("hot")], team)

        assert result.reassignments[0].to_worker == "big"

    def test_highest_risk_served_first(self):
        """Test at-risk workers are visited in the order given."""
        rebalancer = WorkloadRebalancer()
        team = [
            Worker(id="second", name="Second", velocity=5),
            Worker(id="first", name="First", velocity=5),
            Worker(id="helper", name="Helper", velocity=1),
        ]
        assignments = [assign("s", "second", 8), assign("f", "first", 8)]
        entries = [flagged("first", 80.0), flagged("second", 60.0)]

        result = rebalancer.rebalance(assignments, entries, team)

        assert result.total_moved == 1
        assert result.reassignments[0].from_worker == "first"

    def test_at_risk_workers_never_receive(self):
        """Test an underloaded but at-risk worker is not a receiver."""
        rebalancer = WorkloadRebalancer()
        team = [
            Worker(id="hot", name="Hot", velocity=5),
            Worker(id="tired", name="Tired", velocity=5),
        ]

        result = rebalancer.rebalance(
            [assign("a", "hot", 8)],
            [flagged("hot"), flagged("tired", 55.0)],
            team
        )

        assert result.total_moved == 0
        assert result.updated_assignments[0].assigned_to == "hot"

    def test_busy_workers_are_not_receivers(self):
        """Test workers at 70% of capacity or more do not receive work."""
        rebalancer = WorkloadRebalancer()
        team = [
            Worker(id="hot", name="Hot", velocity=5),
            Worker(id="busy", name="Busy", velocity=5),
        ]
        assignments = [assign("a", "hot", 5), assign("b", "busy", 35)]

        result = rebalancer.rebalance(assignments, [flagged("hot")], team)

        assert result.total_moved == 0

    def test_entries_not_at_risk_ignored(self):
        """Test only flagged entries trigger moves."""
        rebalancer = WorkloadRebalancer()
        team = [Worker(id="ok", name="Ok", velocity=5), Worker(id="cool", name="Cool", velocity=5)]

        result = rebalancer.rebalance([assign("a", "ok", 8)], [flagged("ok", 40.0, at_risk=False)], team)

        assert result.total_moved == 0

    def test_defaults_for_missing_points_and_velocity(self):
        """Test points default to 5 and velocity to 5 (capacity 50)."""
        rebalancer = WorkloadRebalancer()
        team = [Worker(id="hot", name="Hot", velocity=5), Worker(id="cool", name="Cool")]
        assignments = [assign("a", "hot"), assign("c", "cool", 30)]

        result = rebalancer.rebalance(assignments, [flagged("hot")], team)

        assert result.total_moved == 1
        assert result.reassignments[0].points == 5

    def test_unknown_at_risk_worker_skipped(self):
        """Test at-risk ids outside the roster are skipped."""
        rebalancer = WorkloadRebalancer()
        team = [Worker(id="cool", name="Cool", velocity=5)]

        result = rebalancer.rebalance([assign("a", "ghost", 8)], [flagged("ghost")], team)

        assert result.total_moved == 0
        assert result.updated_assignments == [assign("a", "ghost", 8)]

    def test_empty_inputs(self):
        """Test empty input gives an empty result."""
        result = rebalance_workload([], [], [])

        assert result.reassignments == []
        assert result.updated_assignments == []
        assert result.to_dict()["summary"] == {"totalMoved": 0, "fromWorkers": [], "toWorkers": []}

    def test_inputs_not_mutated(self):
        """Test the caller's plan, entries and roster are untouched."""
        team = [Worker(id="hot", name="Hot", velocity=5), Worker(id="cool", name="Cool", velocity=5)]
        assignments = [assign("t8", "hot", 8), assign("t5", "hot", 5)]
        entries = [flagged("hot")]
        before = copy.deepcopy((assignments, entries, team))

        result = rebalance_workload(assignments, entries, team)

        assert result.total_moved == 2
        assert (assignments, entries, team) == before
        assert result.updated_assignments is not assignments


class TestRebalanceResult:
    """Tests for the result summary."""

    def test_summary_unique_workers(self):
        """Test summary lists each worker once in first-seen order."""
        result = RebalanceResult(reassignments=[
            Reassignment("a", "A", "hot", "cool", 5, "r"),
            Reassignment("b", "B", "hot", "warm", 3, "r"),
            Reassignment("c", "C", "busy", "cool", 2, "r"),
        ])

        data = result.to_dict()

        assert data["summary"] == {
            "totalMoved": 3,
            "fromWorkers": ["hot", "busy"],
            "toWorkers": ["cool", "warm"],
        }
        assert data["reassignments"][0] == {
            "taskId": "a",
            "taskName": "A",
            "from": "hot",
            "to": "cool",
            "points": 5,
            "reason": "r",
        }


class TestPlanningCycle:
    """End-to-end planning, scoring and rebalancing."""

    def test_rebalance_generated_plan(self):
        """Test a speed plan piles work on the fastest worker and rebalancing relieves them."""
        team = [
            Worker(id="ace", name="Ace", velocity=6, skills={"backend": 0.9}),
            Worker(id="rookie", name="Rookie", velocity=3, skills={"backend": 0.4}),
        ]
        backlog = [Task(id=f"T-{i}", name=f"Task {i}", type="backend", points=5) for i in range(6)]

        speed, _ = AssignmentPlanner().generate_plans(backlog, team)
        loads = PlanEvaluator().load_by_worker(speed.assignments)

        loaded_team = [
            Worker(id=w.id, name=w.name, velocity=w.velocity, skills=w.skills,
                   current_load=loads.get(w.key, 0))
            for w in team
        ]
        entries = BurnoutRiskScorer().identify_at_risk(
            loaded_team, [BurnoutSignal(username="ace", risk_score=80)]
        )
        result = WorkloadRebalancer().rebalance(speed.assignments, entries, team)

        assert entries[0].id == "ace" and entries[0].at_risk
        assert result.total_moved >= 1
        assert set(result.from_workers) == {"ace"}
        assert set(result.to_workers) == {"rookie"}
