# %% [markdown]
# # Dimerisation with dynamic partitioning
#
# Monomers start abundant and are treated continuously, dimers start at zero
# and are simulated discretely until they become plentiful.

# %%
import numpy as np

from hybrid_crn import HybridModel, SolverOptions, configure_logging, interrupt_handler
from hybrid_crn.results import save_results
from hybrid_crn.results.plotting import mode_fraction, plot_trajectories

configure_logging("INFO")

# %% [markdown]
# ## 1) Model

# %%
m = HybridModel(species=["M", "D"])
m.initial(M=2000)
m.species_options("D", switch_min=50)
m.add_reaction({"M": 2}, {"D": 1}, rate=1e-4, name="bind")
m.add_reaction({"D": 1}, {"M": 2}, rate=0.05, name="unbind")
m.build(SolverOptions(atol=1e-6, rtol=1e-6, integrator_kwargs={"method": "BDF"}))
print(m.describe_reactions())

# %% [markdown]
# ## 2) Run (Ctrl-C stops after the current trajectory)

# %%
with interrupt_handler() as token:
    res = m.run(time=50.0, dt=0.5, trajectories=20, seed=7, token=token, progress=True)

print(f"{res.completed}/{res.n_trajectories} trajectories")
total_monomers = res.trajectories[: res.completed, :, 0] + 2 * res.trajectories[: res.completed, :, 1]
print("monomer units conserved:", np.allclose(total_monomers, 2000, atol=1e-3))

# %% [markdown]
# ## 3) Save and plot

# %%
save_results(res, "dimerisation", meta=m.metadata())
plot_trajectories(res, save_path="dimerisation.png")
print("fraction of trajectories with D discrete (last sample):", mode_fraction(res)[-1, 1])
