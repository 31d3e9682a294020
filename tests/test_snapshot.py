# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Tests for snapshot capture and the dictionary schema."""

import json

from footyline.engine.ball import BallSnapshot, BallState, DisposalKind, FlightData
from footyline.engine.grid import GridPosition, Side
from footyline.engine.snapshot import NO_OWNER, Snapshot


def through_json(snapshot: Snapshot) -> Snapshot:
    return Snapshot.from_dict(json.loads(json.dumps(snapshot.to_dict())))


class TestSnapshotSchema:
    """The dictionary form uses the documented keys."""

    def test_top_level_sections(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        data = engine.capture_snapshot().to_dict()
        assert set(data) == {"tick", "ball", "teams", "clock"}
        assert data["ball"]["ownerId"] == NO_OWNER
        assert data["ball"]["state"] == "with_umpire"
        assert data["ball"]["pos"] == {"x": 16, "y": 12}
        assert [team["side"] for team in data["teams"]] == ["home", "away"]
        assert set(data["teams"][0]["units"][0]) == {
            "id",
            "pos",
            "stamina",
            "state",
            "hasBall",
            "quality",
            "target",
            "blockedTicks",
        }
        assert data["clock"]["phase"] == "pre_match"
        assert data["clock"]["ballUps"] == 0

    def test_lookup_helpers(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        snapshot = engine.capture_snapshot()
        assert snapshot.team(Side.AWAY).side is Side.AWAY
        assert snapshot.unit(12).unit_id == 12
        assert snapshot.unit(99) is None


class TestSnapshotRoundTrip:
    """Snapshots survive a trip through JSON unchanged."""

    def test_mid_match_snapshot(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        for _ in range(25):
            engine.step()
        snapshot = engine.capture_snapshot()
        assert through_json(snapshot) == snapshot

    def test_snapshot_with_flight(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        engine.step()
        flight = FlightData(GridPosition(10, 12), GridPosition(20, 12), 1, 4, DisposalKind.KICK, 5, 6)
        engine.ball.restore(BallSnapshot(GridPosition(12, 12), BallState.LOOSE_IN_AIR, None, Side.HOME, 0.0, flight))
        snapshot = engine.capture_snapshot()
        assert snapshot.to_dict()["ball"]["flight"]["intendedTargetId"] == 6
        assert through_json(snapshot) == snapshot

    def test_finished_match_snapshot(self, make_engine) -> None:
        engine = make_engine(quarter_ticks=10)
        engine.run_until_finished()
        snapshot = engine.capture_snapshot()
        data = snapshot.to_dict()
        assert len(data["clock"]["quarterScores"]) == 4
        assert data["clock"]["result"] is not None
        assert through_json(snapshot) == snapshot

    def test_restoring_a_decoded_snapshot(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        for _ in range(10):
            engine.step()
        saved = through_json(engine.capture_snapshot())
        for _ in range(10):
            engine.step()
        engine.restore_snapshot(saved)
        assert engine.capture_snapshot() == saved
        assert engine.tick == 10
