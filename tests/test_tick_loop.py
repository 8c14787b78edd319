from pathlib import Path

from tilesense.app import iter_scenario, load_scenario
from tilesense.sim.config import SensorConfig
from tilesense.sim.contracts import Direction, Event
from tilesense.sim.footsteps import RecordingAudio
from tilesense.sim.script import FrameInput, expand_script
from tilesense.sim.tick_loop import FrameScheduler, run_ticks
from tilesense.sim.world_state import EventState, PlayerState, TileMap, WorldState

DEMO_WORLD = Path(__file__).resolve().parents[1] / "world" / "demo"


def test_scheduler_runs_callbacks_in_order() -> None:
    calls: list[str] = []
    scheduler = FrameScheduler()

    def first(frame: int) -> Event | None:
        calls.append(f"first:{frame}")
        return None

    def second(frame: int) -> Event | None:
        calls.append(f"second:{frame}")
        return Event(kind="PING", payload={"frame": frame})

    scheduler.register("first", first)
    scheduler.register("second", second)
    events = scheduler.run_frame(3)

    assert calls == ["first:3", "second:3"]
    assert [event.kind for event in events] == ["PING"]


def test_walk_step_moves_and_plays_footstep() -> None:
    state = _build_state(player=PlayerState(x=1, y=1))
    audio = RecordingAudio()
    script = expand_script(["walk:right"])

    payloads = list(
        run_ticks(
            state,
            ticks=len(script),
            script=script,
            config=SensorConfig(),
            audio=audio,
        )
    )

    first_kinds = [event.kind for event in payloads[0].events or []]
    assert [payload.tick for payload in payloads] == list(range(1, 17))
    assert "PLAYER_STEP" in first_kinds
    assert "FOOTSTEP" in first_kinds
    assert payloads[0].actors[0].x == 2
    assert payloads[0].actors[0].direction == Direction.RIGHT
    assert payloads[0].actors[0].moving
    assert not payloads[-1].actors[0].moving
    assert [effect.name for effect in audio.played] == ["Footstep_Left"]


def test_blocked_step_only_turns() -> None:
    state = _build_state(player=PlayerState(x=0, y=0, direction=Direction.DOWN))

    payloads = list(
        run_ticks(
            state,
            ticks=1,
            script=[FrameInput(direction=Direction.LEFT)],
            config=SensorConfig(),
        )
    )

    assert payloads[0].events is None
    assert (state.player.x, state.player.y) == (0, 0)
    assert state.player.direction == Direction.LEFT


def test_sensor_toggles_every_satisfying_frame() -> None:
    event = EventState(
        event_id=1,
        name="Trap",
        x=2,
        y=1,
        commands=[
            {
                "mode": "Basic",
                "operator": "less than or equal to",
                "distance": 1,
                "switch": 4,
            }
        ],
    )
    state = _build_state(player=PlayerState(x=1, y=1), events={1: event})

    payloads = list(run_ticks(state, ticks=3, config=SensorConfig()))

    assert payloads[0].flags.self_switches == {"1:1:A": True}
    assert payloads[1].flags.self_switches == {"1:1:A": False}
    assert payloads[2].flags.switches == {4: True}
    assert [event.kind for event in payloads[0].events or []] == ["SWITCH_TOGGLED"]
    assert payloads[0].events[0].payload["mode"] == "all_directions"


def test_malformed_command_never_toggles() -> None:
    event = EventState(
        event_id=1,
        name="Broken",
        x=2,
        y=1,
        commands=[{"mode": "Basic", "operator": "nearby"}, {"mode": "Nope"}],
    )
    state = _build_state(player=PlayerState(x=1, y=1), events={1: event})

    payloads = list(run_ticks(state, ticks=5, config=SensorConfig()))

    assert all(payload.events is None for payload in payloads)
    assert payloads[-1].flags.self_switches == {}


def test_event_patrol_route() -> None:
    event = EventState(
        event_id=1,
        name="Guard",
        x=5,
        y=5,
        route=[Direction.LEFT, Direction.RIGHT],
        move_interval=2,
    )
    state = _build_state(events={1: event})

    list(run_ticks(state, ticks=2, config=SensorConfig()))
    assert (event.x, event.y, event.direction) == (4, 5, Direction.LEFT)

    list(run_ticks(state, ticks=2, config=SensorConfig()))
    assert (event.x, event.y, event.direction) == (5, 5, Direction.RIGHT)


def test_demo_scenario_stealth_kill_and_blocked_guard() -> None:
    state, config, script = load_scenario(DEMO_WORLD, environ={})

    payloads = list(iter_scenario(state, config=config, script=script))
    final = payloads[-1].flags

    assert final.self_switches["1:3:B"] is True
    assert final.switches[3] is True
    assert final.switches[2] is False
    assert 1 not in final.switches
    assert (state.player.x, state.player.y) == (7, 2)


def _build_state(
    *,
    player: PlayerState | None = None,
    events: dict[int, EventState] | None = None,
    width: int = 10,
    height: int = 10,
) -> WorldState:
    tile_map = TileMap(
        lines=["." * width for _ in range(height)],
        regions=[[0] * width for _ in range(height)],
        terrain=[[0] * width for _ in range(height)],
        width=width,
        height=height,
    )
    return WorldState(map_id=1, tile_map=tile_map, player=player, events=events or {})
