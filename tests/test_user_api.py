import numpy as np
import pytest

from hybrid_crn import HybridModel, SpeciesMode


def test_build_and_run_conversion():
    m = HybridModel(species=["A", "B"])
    m.initial(A=100)
    m.species_options("A", mode=SpeciesMode.CONTINUOUS)
    m.species_options("B", mode=SpeciesMode.CONTINUOUS)
    m.add_reaction({"A": 1}, {"B": 1}, rate=0.5, name="conv")

    res = m.build().run(time=10.0, dt=1.0, seed=0)

    assert res.species == ["A", "B"]
    assert np.allclose(res.trajectories[0].sum(axis=1), 100.0, atol=1e-6)
    assert np.all(np.diff(res.trajectories[0, :, 0]) < 0)


def test_stoichiometry_and_reactant_orders():
    m = HybridModel(species=["A", "B", "E"])
    m.add_reaction({"A": 2, "E": 1}, {"B": 1, "E": 1}, rate=1.0)
    m.build()

    assert np.array_equal(m.model.stoichiometry, [[-2, 1, 0]])
    assert np.array_equal(m.solver.propensity.reactant_orders, [[2, 0, 1]])


def test_catalyst_enters_dependency_graph():
    m = HybridModel(species=["E", "S", "P"])
    m.add_reaction({}, {"E": 1}, rate=1.0, name="make_E")
    m.add_reaction({"E": 1, "S": 1}, {"E": 1, "P": 1}, rate=1.0, name="convert")
    m.build()

    assert m.model.reactions[0].affected_reactions == (0, 1)


def test_describe_and_metadata():
    m = HybridModel(species=["A", "B"])
    m.initial(A=5)
    m.add_reaction({"A": 2}, {"B": 1}, rate=0.25, name="dimer")
    m.add_reaction({"B": 1}, {}, rate=0.1, name="loss")
    m.build()

    text = m.describe_reactions()
    assert "dimer: 2 A -> B  (k=0.25)" in text
    assert "loss: B -> 0  (k=0.1)" in text

    meta = m.metadata()
    assert meta["species"] == ["A", "B"]
    assert meta["initial_populations"] == {"A": 5, "B": 0}
    assert meta["modes"] == {"A": "DYNAMIC", "B": "DYNAMIC"}
    assert meta["integrator"] == "ScipyIntegrator"


def test_validation_and_build_state():
    m = HybridModel(species=["A"])
    with pytest.raises(ValueError):
        m.initial(Z=1)
    with pytest.raises(ValueError):
        m.add_reaction({"A": 1}, {}, rate=-1.0)
    with pytest.raises(RuntimeError):
        m.run(time=1.0, dt=0.1)

    m.add_reaction({"A": 1}, {}, rate=1.0).build()
    m.initial(A=3)
    with pytest.raises(RuntimeError):
        _ = m.solver

    with pytest.raises(ValueError):
        HybridModel(species=["A", "A"])
