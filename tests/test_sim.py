from __future__ import annotations

from ordersizing.sim import ACTIONS, SimConfig, Simulator


def test_simulation_is_deterministic_and_consistent():
    cfg = SimConfig(seed=7, n_events=600, snapshot_every=100)
    a = Simulator(cfg).run()
    b = Simulator(cfg).run()
    assert a.actions.equals(b.actions)
    assert len(a.actions) == 600
    assert len(a.snapshots) == 6
    assert len(a.latencies_ns) == 600
    assert set(a.actions["action"]) <= set(ACTIONS)
    assert a.submitted + a.rejected == int((a.actions["action"] == "submit").sum())
    assert a.submitted > 0
