import numpy as np

from hybrid_crn.integrators import IntegratorStatus, RK4Integrator, rk4_step


def test_rk4_exponential_decay():
    def rhs(y, t):
        return -y

    y0 = np.array([1.0])
    t0 = 0.0
    dt = 0.1

    y1 = rk4_step(y0, t0, dt, rhs)

    expected = np.exp(-dt)
    assert np.allclose(y1[0], expected, atol=1e-7)


def test_rk4_shape_preserved():
    def rhs(y, t):
        return np.ones_like(y)

    y0 = np.zeros(7)
    y1 = rk4_step(y0, 0.0, 0.5, rhs)

    assert y1.shape == (7,)
    assert np.allclose(y1, 0.5)  # since y' = 1


def test_rk4_integrator_advances_to_target():
    integrator = RK4Integrator(lambda t, y: -y, atol=1e-6, rtol=1e-6, max_step=0.01)

    result = integrator.advance(np.array([1.0, 2.0]), 0.0, 1.0)

    assert result.ok
    assert result.t == 1.0
    assert np.allclose(result.y, [np.exp(-1.0), 2 * np.exp(-1.0)], atol=1e-8)


def test_rk4_integrator_does_not_modify_input():
    integrator = RK4Integrator(lambda t, y: np.ones_like(y), atol=1e-6, rtol=1e-6)
    y0 = np.zeros(3)

    integrator.advance(y0, 0.0, 1.0)

    assert np.array_equal(y0, np.zeros(3))


def test_rk4_integrator_reports_bad_tolerance():
    integrator = RK4Integrator(lambda t, y: -y, atol=-1.0, rtol=1e-6)

    result = integrator.advance(np.array([1.0]), 0.0, 1.0)

    assert result.status == IntegratorStatus.ILL_INPUT
    assert not result.ok


def test_rk4_integrator_reports_blow_up():
    integrator = RK4Integrator(lambda t, y: y * 1e300, atol=1e-6, rtol=1e-6, max_step=0.5)

    result = integrator.advance(np.array([1e10]), 0.0, 1.0)

    assert result.status == IntegratorStatus.CONV_FAILURE
