import numpy as np
import pytest

from hybrid_crn.core import IntegrationVector, draw_offset
from hybrid_crn.integrators import RK4Integrator
from hybrid_crn.propensity import FunctionPropensity, MassActionPropensity
from hybrid_crn.reactions import Model


def _decay_model():
    # A -> B with propensity k * A
    model = Model.from_names(["A", "B"], [100, 0], ["conv"], species_changes=[[-1, 1]])
    prop = MassActionPropensity(rates=[0.5], reactant_orders=np.array([[1, 0]]))
    return model, prop


def test_layout_and_initial_vector():
    model, prop = _decay_model()
    codec = IntegrationVector(model, prop)
    y = codec.initial_vector(np.random.default_rng(0))

    assert codec.size == 3
    assert np.array_equal(codec.concentrations(y), [100.0, 0.0])
    offsets = codec.offsets(y)
    assert offsets.shape == (1,)
    assert np.all(offsets < 0) and np.all(np.isfinite(offsets))


def test_draw_offset_strictly_negative():
    values = draw_offset(np.random.default_rng(1), size=10_000)
    assert np.all(values < 0.0)
    assert np.all(np.isfinite(values))


def test_derivative_deterministic_reaction_moves_concentrations():
    model, prop = _decay_model()
    codec = IntegrationVector(model, prop)
    codec.deterministic = np.array([True])

    dydt = codec.derivative(0.0, np.array([100.0, 0.0, -1.0]))

    assert np.allclose(dydt, [-50.0, 50.0, 0.0])


def test_derivative_stochastic_reaction_moves_offset_only():
    model, prop = _decay_model()
    codec = IntegrationVector(model, prop)
    codec.deterministic = np.array([False])

    dydt = codec.derivative(0.0, np.array([100.0, 0.0, -1.0]))

    assert np.allclose(dydt, [0.0, 0.0, 50.0])


def test_derivative_scales_with_stoichiometric_coefficient():
    # 2A -> B
    model = Model.from_names(["A", "B"], [10, 0], ["dimer"], species_changes=[[-2, 1]])
    prop = FunctionPropensity([lambda x, r: 3.0], species_names=["A", "B"])
    codec = IntegrationVector(model, prop)

    dydt = codec.derivative(0.0, np.array([10.0, 0.0, -1.0]))

    assert np.allclose(dydt[:2], [-6.0, 3.0])


def test_derivative_has_no_side_effects():
    model, prop = _decay_model()
    codec = IntegrationVector(model, prop)
    y = np.array([100.0, 0.0, -1.0])
    before = y.copy()

    first = codec.derivative(0.0, y)
    second = codec.derivative(0.0, y)

    assert np.array_equal(y, before)
    assert np.array_equal(first, second)


def test_offsets_non_decreasing_for_random_positive_propensities():
    rng = np.random.default_rng(7)
    n_species, n_reactions = 3, 4
    changes = rng.integers(-2, 3, size=(n_reactions, n_species))
    model = Model.from_names(
        ["X", "Y", "Z"], [5, 5, 5], [f"r{j}" for j in range(n_reactions)], species_changes=changes
    )
    rates = rng.random(n_reactions) * 5
    prop = MassActionPropensity(rates=rates, reactant_orders=rng.integers(0, 2, size=(n_reactions, n_species)))
    codec = IntegrationVector(model, prop)
    codec.deterministic = np.zeros(n_reactions, dtype=bool)

    for _ in range(50):
        y = np.concatenate([rng.random(n_species) * 50, -rng.random(n_reactions)])
        assert np.all(codec.offsets(codec.derivative(0.0, y)) >= 0.0)

    integrator = RK4Integrator(codec.derivative, atol=1e-6, rtol=1e-6, max_step=0.05)
    y = codec.initial_vector(rng)
    t = 0.0
    for _ in range(20):
        result = integrator.advance(y, t, t + 0.1)
        assert result.ok
        assert np.all(codec.offsets(result.y) >= codec.offsets(y))
        y, t = result.y, result.t


def test_evaluator_reaction_count_must_match():
    model, _ = _decay_model()
    with pytest.raises(ValueError):
        IntegrationVector(model, MassActionPropensity(rates=[], reactant_orders=np.zeros((0, 2))))


def test_pack_validates_shapes():
    model, prop = _decay_model()
    codec = IntegrationVector(model, prop)
    with pytest.raises(ValueError):
        codec.pack(np.zeros(3), np.zeros(1))


def test_stochastic_offset_waits_for_enough_reactant():
    # 2A -> B fires only while at least two A are present
    model = Model.from_names(["A", "B"], [1, 0], ["dimer"], species_changes=[[-2, 1]])
    prop = FunctionPropensity([lambda x, r: 0.5 * x["A"]], species_names=["A", "B"])
    codec = IntegrationVector(model, prop)
    codec.deterministic = np.array([False])

    assert np.allclose(codec.derivative(0.0, np.array([1.5, 0.0, -1.0])), [0.0, 0.0, 0.0])
    assert np.allclose(codec.derivative(0.0, np.array([2.0, 0.0, -1.0])), [0.0, 0.0, 1.0])

    # deterministic reactions are not gated
    codec.deterministic = np.array([True])
    assert np.allclose(codec.derivative(0.0, np.array([1.5, 0.0, -1.0])), [-1.5, 0.75, 0.0])
