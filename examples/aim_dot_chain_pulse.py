import numpy as np
import matplotlib.pyplot as plt

import qdaim
from qdaim.quantum_dot import make_dots
from qdaim.tools import gaussian_pulse
from qdaim.units import HBAR

# a chain of identical dots along x, one per 0.05 um box
num_dots = 20
positions = np.column_stack(
    [0.05 * (np.arange(num_dots) + 0.5), np.zeros(num_dots), np.zeros(num_dots)]
)
frequency = 1500.0 / HBAR  # 1.5 eV transition, rad/ps
dots = make_dots(
    positions, dipole=(0.0, 0.0, 5.2e-4), frequency=frequency, damping=(10.0, 20.0)
)

# pi pulse (in the rotating frame) travelling along z, so every dot sees it at once
sigma = 0.05
dipole_rabi = 5.2e-4 / HBAR
amplitude = np.pi / (dipole_rabi * sigma * np.sqrt(2.0 * np.pi))
pulse = gaussian_pulse(amplitude=amplitude, t0=0.3, sigma=sigma, direction=(0.0, 0.0, 1.0))

sim = qdaim.AIMSimulation(
    dots,
    dt=1e-4,
    num_steps=8000,
    spacing=0.05,
    pulse=pulse,
    laser_frequency=frequency,
    expansion_order=0,
    verbose=True,
)
sim.run()

population = sim.population_history()
time = np.asarray(sim.time_history)
print("final populations:", population[:, -1])

if __name__ == "__main__":
    plt.figure()
    for n in (0, num_dots // 2, num_dots - 1):
        plt.plot(time, population[n], label=f"dot {n}")
    plt.xlabel("Time (ps)")
    plt.ylabel("Excited State Population")
    plt.title("Pulse-driven quantum dot chain")
    plt.legend()
    plt.grid()
    plt.show()
