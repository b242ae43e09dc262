"""Tests for the individual force contributions."""

import numpy as np
import pytest

from graph_backend.src.services.config import LayoutConfig
from graph_backend.src.services.forces import (
    CollideForce,
    LinkForce,
    ManyBodyForce,
    PositionForce,
    build_forces,
)
from graph_backend.src.services.simulation_state import SimulationState


def make_state(positions, links=(), seed=0) -> SimulationState:
    pos = np.array(positions, dtype=float).reshape(-1, 2)
    return SimulationState(
        node_ids=[f"n{i}" for i in range(len(pos))],
        positions=pos,
        velocities=np.zeros_like(pos),
        links=np.array(links, dtype=np.intp).reshape(-1, 2),
        rng=np.random.default_rng(seed),
    )


def scattered_positions(count: int, seed: int = 1) -> np.ndarray:
    return np.random.default_rng(seed).uniform(-500.0, 500.0, size=(count, 2))


class TestLinkForce:
    def test_stretched_link_pulls_endpoints_together(self):
        state = make_state([(0.0, 0.0), (300.0, 0.0)], links=[(0, 1)])
        force = LinkForce(distance=100.0)
        force.initialize(state)

        force.apply(state, alpha=1.0)

        assert state.velocities[0, 0] > 0
        assert state.velocities[1, 0] < 0
        # Degree 1 on both ends: stiffness 1, bias 0.5, so the gap closes fully.
        assert state.velocities[0, 0] == pytest.approx(100.0)
        assert state.velocities[1, 0] == pytest.approx(-100.0)

    def test_compressed_link_pushes_endpoints_apart(self):
        state = make_state([(0.0, 0.0), (40.0, 0.0)], links=[(0, 1)])
        force = LinkForce(distance=100.0)
        force.initialize(state)

        force.apply(state, alpha=1.0)

        assert state.velocities[0, 0] < 0
        assert state.velocities[1, 0] > 0

    def test_default_stiffness_uses_lower_degree(self):
        state = make_state([(0, 0), (1, 0), (2, 0), (3, 0)], links=[(0, 1), (0, 2), (0, 3)])
        force = LinkForce()
        force.initialize(state)

        np.testing.assert_allclose(force._strengths, [1.0, 1.0, 1.0])
        np.testing.assert_allclose(force._bias, [0.75, 0.75, 0.75])

    def test_no_links_is_noop(self):
        state = make_state([(0.0, 0.0), (10.0, 0.0)])
        force = LinkForce()
        force.initialize(state)

        force.apply(state, alpha=1.0)

        assert not state.velocities.any()


class TestManyBodyForce:
    def test_negative_strength_repels(self):
        state = make_state([(0.0, 0.0), (10.0, 0.0)])
        force = ManyBodyForce(strength=-100.0)
        force.initialize(state)

        force.apply(state, alpha=1.0)

        # Magnitude is strength * alpha / distance.
        assert state.velocities[0, 0] == pytest.approx(-10.0)
        assert state.velocities[1, 0] == pytest.approx(10.0)
        # Equal y coordinates are jiggled, which leaves only a negligible y component.
        assert np.abs(state.velocities[:, 1]).max() < 1e-6

    def test_coincident_particles_are_separated(self):
        state = make_state([(5.0, 5.0), (5.0, 5.0)])
        force = ManyBodyForce(strength=-100.0)
        force.initialize(state)

        force.apply(state, alpha=1.0)

        assert np.all(np.isfinite(state.velocities))
        assert np.any(state.velocities != 0)

    def test_barnes_hut_with_zero_theta_matches_exact(self):
        positions = scattered_positions(120)
        exact = make_state(positions)
        approx = make_state(positions)
        exact_force = ManyBodyForce(strength=-100.0, exact_max_nodes=1000)
        bh_force = ManyBodyForce(strength=-100.0, theta=0.0, exact_max_nodes=0)
        exact_force.initialize(exact)
        bh_force.initialize(approx)

        exact_force.apply(exact, alpha=0.5)
        bh_force.apply(approx, alpha=0.5)

        np.testing.assert_allclose(approx.velocities, exact.velocities, rtol=1e-9, atol=1e-12)

    def test_barnes_hut_approximates_exact(self):
        positions = scattered_positions(300, seed=7)
        exact = make_state(positions)
        approx = make_state(positions)
        exact_force = ManyBodyForce(strength=-100.0, exact_max_nodes=1000)
        bh_force = ManyBodyForce(strength=-100.0, theta=0.5, exact_max_nodes=0)
        exact_force.initialize(exact)
        bh_force.initialize(approx)

        exact_force.apply(exact, alpha=1.0)
        bh_force.apply(approx, alpha=1.0)

        error = np.linalg.norm(approx.velocities - exact.velocities)
        assert error / np.linalg.norm(exact.velocities) < 0.05

    def test_single_particle_feels_nothing(self):
        state = make_state([(3.0, 4.0)])
        force = ManyBodyForce()
        force.initialize(state)

        force.apply(state, alpha=1.0)

        assert not state.velocities.any()


class TestPositionForce:
    def test_pulls_toward_origin_on_one_axis(self):
        state = make_state([(100.0, -50.0)])
        PositionForce(axis=0, strength=0.1).apply(state, alpha=1.0)

        assert state.velocities[0, 0] == pytest.approx(-10.0)
        assert state.velocities[0, 1] == 0.0

        PositionForce(axis=1, strength=0.1).apply(state, alpha=0.5)

        assert state.velocities[0, 1] == pytest.approx(2.5)

    def test_rejects_unknown_axis(self):
        with pytest.raises(ValueError):
            PositionForce(axis=2)


class TestCollideForce:
    def test_overlapping_pair_is_pushed_to_contact(self):
        state = make_state([(0.0, 0.0), (10.0, 0.0)])
        force = CollideForce(radius=50.0)

        force.apply(state, alpha=0.001)

        assert state.velocities[0, 0] == pytest.approx(-45.0)
        assert state.velocities[1, 0] == pytest.approx(45.0)
        predicted = state.positions + state.velocities
        assert predicted[1, 0] - predicted[0, 0] == pytest.approx(100.0)

    def test_separated_pair_is_untouched(self):
        state = make_state([(0.0, 0.0), (150.0, 0.0)])

        CollideForce(radius=50.0).apply(state, alpha=1.0)

        assert not state.velocities.any()


def test_build_forces_follows_config_order():
    forces = build_forces(LayoutConfig())

    assert [type(f).__name__ for f in forces] == [
        "LinkForce",
        "ManyBodyForce",
        "PositionForce",
        "PositionForce",
        "CollideForce",
    ]
    assert forces[0].distance == 100.0
    assert forces[1].strength == -100.0
    assert forces[2].strength == 0.1
    assert forces[4].radius == 50.0
