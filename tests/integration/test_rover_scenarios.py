"""End-to-end rover runs through the dispatcher."""

import logging

import pytest
from ulid import ULID

from sequencer import (
    AggregateNotFound,
    Command,
    CommandRejected,
    ConfigurationError,
    DispatcherSettings,
    DrainLimitExceeded,
)
from tests.fixtures.rover import (
    Coordinate,
    MoveForward,
    RoverStatus,
    StartRover,
    TurnLeft,
    TurnOffRover,
    TurnRight,
    build_rover_dispatcher,
)


class Hover(Command):
    """A command the rover domain never declared."""

    pass


def drive_commands(rover_id: ULID, moves: str) -> list[Command]:
    """Translate a string like "RMLMM" into rover commands."""
    commands = {"L": TurnLeft, "R": TurnRight, "M": MoveForward}
    return [commands[move](aggregate_id=rover_id) for move in moves]


def test_rover_on_open_grid(rover_dispatcher, repository, path, obstacles, open_grid):
    """Rover created at (0,0) facing North drives to 1:2:North."""
    start = StartRover(grid=open_grid)
    rover_dispatcher.submit([start, *drive_commands(start.aggregate_id, "RMLMM")])

    processed = rover_dispatcher.run()

    assert processed == 6
    rover = repository.get_by_id(start.aggregate_id)
    assert rover.position == "1:2:North"
    assert rover.version == 6
    assert path.records() == [
        "0:0:North",
        "0:0:East",
        "1:0:East",
        "1:0:North",
        "1:1:North",
        "1:2:North",
    ]
    assert len(obstacles) == 0
    assert rover_dispatcher.is_idle


def test_rover_with_two_moves_east_ends_at_2_2(rover_dispatcher, repository, path, open_grid):
    """R,M,M,L,M,M takes the rover two cells East before turning North."""
    start = StartRover(grid=open_grid)
    rover_dispatcher.submit([start, *drive_commands(start.aggregate_id, "RMMLMM")])

    assert rover_dispatcher.run() == 7
    assert repository.get_by_id(start.aggregate_id).position == "2:2:North"
    assert path.records() == [
        "0:0:North",
        "0:0:East",
        "1:0:East",
        "2:0:East",
        "2:0:North",
        "2:1:North",
        "2:2:North",
    ]


def test_rover_stops_at_obstacle(rover_dispatcher, repository, path, obstacles, blocked_grid, caplog):
    """Rover meets the obstacle at (2,2), flags it once and is shut down."""
    start = StartRover(grid=blocked_grid)
    rover_dispatcher.submit([start, *drive_commands(start.aggregate_id, "RMMLMMMM")])

    with caplog.at_level(logging.WARNING):
        processed = rover_dispatcher.run()

    # 9 submitted + one shutdown per obstacle report (3 reports)
    assert processed == 12
    assert obstacles.flagged() == [Coordinate(x=2, y=2)]
    rover = repository.get_by_id(start.aggregate_id)
    assert rover.status is RoverStatus.TURNED_OFF
    assert rover.position == "2:1:North"
    assert path.last() == "2:1:North"
    # The extra shutdowns reach an already turned off rover
    assert caplog.text.count("Command rejected") == 2


def test_shutdown_runs_after_already_pending_moves(rover_dispatcher, repository, blocked_grid):
    """The policy-issued shutdown joins the tail, behind pending moves."""
    start = StartRover(grid=blocked_grid, x=2, y=1)
    rover_dispatcher.submit(
        [
            start,
            MoveForward(aggregate_id=start.aggregate_id),
            TurnRight(aggregate_id=start.aggregate_id),
        ]
    )

    rover_dispatcher.run()

    rover = repository.get_by_id(start.aggregate_id)
    # The turn was applied before the rover was turned off
    assert rover.position == "2:1:East"
    assert rover.status is RoverStatus.TURNED_OFF


def test_obstacle_run_with_fatal_rejections(repository, path, obstacles, blocked_grid):
    dispatcher = build_rover_dispatcher(
        repository, path, obstacles, DispatcherSettings(fail_on_rejection=True)
    )
    start = StartRover(grid=blocked_grid)
    dispatcher.submit([start, *drive_commands(start.aggregate_id, "RMMLMMMM")])

    with pytest.raises(CommandRejected, match="turned off"):
        dispatcher.run()

    assert repository.get_by_id(start.aggregate_id).status is RoverStatus.TURNED_OFF
    assert [type(cmd) for cmd in dispatcher.pending] == [TurnOffRover]


def test_unregistered_command_leaves_state_unchanged(rover_dispatcher, repository, path, obstacles, open_grid):
    """A command without a handler fails before touching any store."""
    start = StartRover(grid=open_grid)
    rover_dispatcher.submit([start, MoveForward(aggregate_id=start.aggregate_id)])
    rover_dispatcher.run()
    rover_before = repository.get_by_id(start.aggregate_id)
    path_before = path.records()
    obstacles_before = obstacles.flagged()

    rover_dispatcher.submit([Hover(aggregate_id=start.aggregate_id)])
    with pytest.raises(ConfigurationError, match="Hover"):
        rover_dispatcher.run()

    assert repository.list_ids() == [start.aggregate_id]
    assert repository.get_by_id(start.aggregate_id) == rover_before
    assert path.records() == path_before
    assert obstacles.flagged() == obstacles_before


def test_rovers_are_independent(rover_dispatcher, repository, open_grid):
    first, second = StartRover(grid=open_grid), StartRover(grid=open_grid, x=3, y=3)
    rover_dispatcher.submit([first, second, MoveForward(aggregate_id=second.aggregate_id)])

    rover_dispatcher.run()

    assert repository.get_by_id(first.aggregate_id).position == "0:0:North"
    assert repository.get_by_id(second.aggregate_id).position == "3:0:North"


def test_move_for_unknown_rover_raises_not_found(rover_dispatcher, path):
    rover_dispatcher.submit([MoveForward(aggregate_id=ULID())])

    with pytest.raises(AggregateNotFound):
        rover_dispatcher.run()

    assert path.records() == []


def test_drain_limit_applies_to_rover_runs(repository, path, obstacles, open_grid):
    dispatcher = build_rover_dispatcher(
        repository, path, obstacles, DispatcherSettings(max_commands_per_run=2)
    )
    start = StartRover(grid=open_grid)
    dispatcher.submit([start, *drive_commands(start.aggregate_id, "MM")])

    with pytest.raises(DrainLimitExceeded):
        dispatcher.run()

    assert repository.get_by_id(start.aggregate_id).position == "0:1:North"
    assert dispatcher.run() == 1
