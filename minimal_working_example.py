from hybrid_crn import HybridModel, SpeciesMode, configure_logging
from hybrid_crn.results import save_results, load_results
from hybrid_crn.results.plotting import plot_trajectories

configure_logging("INFO")

# -----------------------------
# Build model
# -----------------------------
m = HybridModel(species=["A", "B"])
m.initial(A=100)
m.species_options("A", mode=SpeciesMode.CONTINUOUS)
m.species_options("B", mode=SpeciesMode.CONTINUOUS)
m.add_reaction({"A": 1}, {"B": 1}, rate=0.5, name="conv")
m.build()
print(m.describe_reactions())

# -----------------------------
# Run simulation
# -----------------------------
total_time = 10.0
dt = 1.0
seed = 1

res = m.run(time=total_time, dt=dt, trajectories=1, seed=seed)
print("A + B at each sample:", res.trajectories[0].sum(axis=1))

# -----------------------------
# Save results + metadata
# -----------------------------
meta = m.metadata()
meta.update({"total_time": total_time, "dt": dt, "seed": seed})

save_results(res, "conversion", meta=meta)
loaded, loaded_meta = load_results("conversion")
print("Loaded meta keys:", sorted(loaded_meta.keys()))

plot_trajectories(loaded, save_path="conversion.png")
