"""Unit tests for the look pipeline state machine."""

import logging
import math

import pytest

from conftest import TEST_RES, flat_mapped
from pointing_nav.errors import CollaboratorTimeout, CollaboratorUnavailable, InvalidResult
from pointing_nav.geometry import Point2D, Point3D, Pose2D, Pose3D, Region
from pointing_nav.landscape import MappedLandscape
from pointing_nav.look_pipeline import LookOutcome, PipelineState


def assert_nothing_published(sink):
    sink.publish_trajectory.assert_not_called()
    sink.publish_turn.assert_not_called()
    sink.publish_enable.assert_not_called()


class TestSuccessfulLook:

    def test_runs_every_stage_in_order(self, pipeline, context, collaborators):
        outcome = pipeline.run(context)

        assert outcome.completed
        assert outcome.failure is None
        assert outcome.states == [
            PipelineState.IDLE,
            PipelineState.TARGET_ACQUIRED,
            PipelineState.LANDSCAPE_MAPPED,
            PipelineState.GOAL_COMPUTED,
            PipelineState.COMPLETED,
        ]
        assert pipeline.state is PipelineState.IDLE
        collaborators.extract_target.assert_called_once()
        collaborators.map_relevance.assert_called_once()
        collaborators.sample_goal.assert_called_once()
        collaborators.plan_path.assert_called_once()

    def test_target_within_bounds_is_accepted(self, pipeline, context):
        outcome = pipeline.run(context)

        assert PipelineState.TARGET_ACQUIRED in outcome.states
        assert outcome.target == Point2D(50.0, -30.0)

    def test_gesture_pose_is_forwarded(self, pipeline, context, poses, collaborators):
        poses.update_gesture(Pose3D(0.3, -0.1, 1.2))

        pipeline.run(context)

        gesture = collaborators.extract_target.call_args.args[0]
        assert (gesture.x, gesture.y, gesture.z) == pytest.approx((30.0, -10.0, 120.0))

    def test_mapping_and_sampling_inputs(self, pipeline, context, collaborators, landscapes):
        pipeline.run(context)

        target, landscape = collaborators.map_relevance.call_args.args
        assert target == Point2D(50.0, -30.0)
        assert landscape is landscapes.landscape

        target, mapped = collaborators.sample_goal.call_args.args
        assert target == Point2D(50.0, -30.0)
        assert isinstance(mapped, MappedLandscape)
        assert mapped.flatten() == flat_mapped()

    def test_planner_request(self, pipeline, context, collaborators, poses):
        poses.update_robot(Pose2D(-0.5, 0.25, 0.0))

        pipeline.run(context)

        workspace, obstacles, start, goal_region = collaborators.plan_path.call_args.args
        assert workspace == Region.box(0, 0, 400, 400)
        assert obstacles == [context.obstacle_region]
        assert start == Point3D(-50.0, 25.0, 0.0)
        assert goal_region == Region.box(100.0, 100.0, 20.0, 20.0)

    def test_trajectory_drops_z(self, pipeline, context, sink):
        outcome = pipeline.run(context)

        expected = [Point2D(0.0, 0.0), Point2D(50.0, 50.0), Point2D(100.0, 100.0)]
        sink.publish_trajectory.assert_called_once_with(expected)
        assert outcome.trajectory == expected

    def test_turn_towards_goal(self, pipeline, context, sink):
        outcome = pipeline.run(context)

        sink.publish_turn.assert_called_once()
        delta = sink.publish_turn.call_args.args[0]
        assert delta == pytest.approx(0.785398, abs=1e-6)
        assert outcome.turn == delta
        sink.publish_enable.assert_not_called()

    def test_turn_uses_pose_after_planning(self, pipeline, context, collaborators, poses, sink):
        def planner_while_robot_moves(*args):
            # robot drives to (100, 0) facing +y while the planner runs
            poses.update_robot(Pose2D(1.0, 0.0, math.pi / 2))
            return [Point3D(0.0, 0.0, 0.0)]

        collaborators.plan_path.side_effect = planner_while_robot_moves

        pipeline.run(context)

        delta = sink.publish_turn.call_args.args[0]
        assert delta == pytest.approx(0.0, abs=1e-9)

    def test_boundary_target_is_accepted(self, pipeline, context, collaborators):
        collaborators.extract_target.return_value = Point2D(200.0, -200.0)

        assert pipeline.run(context).completed


class TestAbortedLook:

    def test_target_out_of_bounds(self, pipeline, context, collaborators, sink):
        collaborators.extract_target.return_value = Point2D(250.0, 0.0)

        outcome = pipeline.run(context)

        assert outcome.states == [PipelineState.IDLE]
        assert isinstance(outcome.failure, InvalidResult)
        assert pipeline.state is PipelineState.IDLE
        collaborators.map_relevance.assert_not_called()
        assert_nothing_published(sink)

    @pytest.mark.parametrize("target", [
        Point2D(float('nan'), 0.0), Point2D(10.0, float('inf')), Point2D(0.0, -250.0),
    ])
    def test_invalid_targets(self, pipeline, context, collaborators, sink, target):
        collaborators.extract_target.return_value = target

        outcome = pipeline.run(context)

        assert not outcome.completed
        assert outcome.reached is PipelineState.IDLE
        collaborators.map_relevance.assert_not_called()
        assert_nothing_published(sink)

    def test_non_finite_mapped_landscape(self, pipeline, context, collaborators, sink):
        values = flat_mapped()
        values[0] = float('nan')
        collaborators.map_relevance.return_value = values

        outcome = pipeline.run(context)

        assert outcome.reached is PipelineState.TARGET_ACQUIRED
        assert isinstance(outcome.failure, InvalidResult)
        collaborators.sample_goal.assert_not_called()
        assert_nothing_published(sink)

    def test_mapped_landscape_wrong_size(self, pipeline, context, collaborators, sink):
        collaborators.map_relevance.return_value = [0.5] * (TEST_RES * TEST_RES - 1)

        outcome = pipeline.run(context)

        assert isinstance(outcome.failure, InvalidResult)
        collaborators.sample_goal.assert_not_called()
        assert_nothing_published(sink)

    def test_nan_goal(self, pipeline, context, collaborators, sink):
        collaborators.sample_goal.return_value = Point2D(float('nan'), 10.0)

        outcome = pipeline.run(context)

        assert isinstance(outcome.failure, InvalidResult)
        assert outcome.reached is PipelineState.LANDSCAPE_MAPPED
        assert pipeline.state is PipelineState.IDLE
        collaborators.plan_path.assert_not_called()
        assert_nothing_published(sink)

    def test_goal_out_of_bounds(self, pipeline, context, collaborators, sink):
        collaborators.sample_goal.return_value = Point2D(0.0, 201.0)

        outcome = pipeline.run(context)

        assert isinstance(outcome.failure, InvalidResult)
        collaborators.plan_path.assert_not_called()
        assert_nothing_published(sink)

    @pytest.mark.parametrize("stage", ["extract_target", "map_relevance", "sample_goal", "plan_path"])
    def test_unavailable_service_aborts_attempt(self, pipeline, context, collaborators, sink, stage):
        getattr(collaborators, stage).side_effect = CollaboratorUnavailable(stage)

        outcome = pipeline.run(context)

        assert isinstance(outcome.failure, CollaboratorUnavailable)
        assert not outcome.completed
        assert pipeline.state is PipelineState.IDLE
        assert_nothing_published(sink)

    def test_timeout_is_an_unavailable_failure(self, pipeline, context, collaborators, sink):
        collaborators.sample_goal.side_effect = CollaboratorTimeout('monte_carlo', 5.0)

        outcome = pipeline.run(context)

        assert isinstance(outcome.failure, CollaboratorTimeout)
        assert outcome.reached is PipelineState.LANDSCAPE_MAPPED
        assert_nothing_published(sink)

    def test_planner_failure_is_recoverable(self, pipeline, context, collaborators, sink):
        collaborators.plan_path.side_effect = [
            CollaboratorUnavailable('rrtStarService'),
            [Point3D(0.0, 0.0, 0.0), Point3D(100.0, 100.0, 0.0)],
        ]

        first = pipeline.run(context)
        second = pipeline.run(context)

        assert first.reached is PipelineState.GOAL_COMPUTED
        assert second.completed
        sink.publish_trajectory.assert_called_once()
        sink.publish_turn.assert_called_once()

    def test_failures_logged_distinctly(self, pipeline, context, collaborators, caplog):
        caplog.set_level(logging.DEBUG)

        collaborators.extract_target.side_effect = CollaboratorUnavailable('gesture_processing')
        pipeline.run(context)
        unavailable = [r for r in caplog.records if "aborted" in r.getMessage()]

        caplog.clear()
        collaborators.extract_target.side_effect = None
        collaborators.extract_target.return_value = Point2D(999.0, 0.0)
        pipeline.run(context)
        invalid = [r for r in caplog.records if "aborted" in r.getMessage()]

        assert [r.levelno for r in unavailable] == [logging.ERROR]
        assert [r.levelno for r in invalid] == [logging.WARNING]

    def test_unexpected_error_aborts_attempt(self, pipeline, context, collaborators, sink, caplog):
        collaborators.plan_path.side_effect = RuntimeError("rcl handle invalid")

        outcome = pipeline.run(context)

        assert isinstance(outcome.failure, RuntimeError)
        assert outcome.reached is PipelineState.GOAL_COMPUTED
        assert pipeline.state is PipelineState.IDLE
        assert not pipeline.busy
        assert_nothing_published(sink)
        assert any(r.levelno == logging.ERROR and "RuntimeError" in r.getMessage()
                   for r in caplog.records)


class TestStateDiscipline:

    @pytest.mark.parametrize("failing", [None, "extract_target", "map_relevance", "sample_goal", "plan_path"])
    def test_states_monotonic_and_reset(self, pipeline, context, collaborators, failing):
        if failing:
            getattr(collaborators, failing).side_effect = CollaboratorUnavailable(failing)

        outcome = pipeline.run(context)

        assert outcome.states == sorted(outcome.states)
        assert len(set(outcome.states)) == len(outcome.states)
        assert outcome.states[0] is PipelineState.IDLE
        assert pipeline.state is PipelineState.IDLE
        assert not pipeline.busy

    def test_state_visible_while_running(self, pipeline, context, collaborators):
        seen = []

        def sample(*args):
            seen.append(pipeline.state)
            return Point2D(100.0, 100.0)

        collaborators.sample_goal.side_effect = sample

        pipeline.run(context)

        assert seen == [PipelineState.LANDSCAPE_MAPPED]

    def test_second_look_while_busy_is_rejected(self, pipeline, context, collaborators, sink):
        nested = []

        def extract(*args):
            assert pipeline.busy
            nested.append(pipeline.run(context))
            return Point2D(50.0, -30.0)

        collaborators.extract_target.side_effect = extract

        outcome = pipeline.run(context)

        assert outcome.completed
        assert len(nested) == 1
        assert nested[0].rejected
        assert nested[0].states == []
        collaborators.extract_target.assert_called_once()
        sink.publish_trajectory.assert_called_once()

    def test_empty_outcome_defaults(self):
        outcome = LookOutcome()
        assert not outcome.completed
        assert outcome.reached is PipelineState.IDLE
