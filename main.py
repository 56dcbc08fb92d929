# main.py
import csv
import logging

import numpy as np

from chamber_config import save_chamber_config
from track import create_random_track, drift_distances
from track_reconstruction import reconstruct_events
from wire import WIRES, uniform_chamber

logging.basicConfig(level=logging.INFO)

num_events = 100
n_chambers = 2
avg_noise_hits = 0.3
noise_window = (0, 120)   # TDC counts
drift_speed = 0.05        # mm per TDC count
time_offset = 20          # TDC counts
output_file = "chamber_hits.csv"
config_file = "chamber_config.csv"

rng = np.random.default_rng()

# Setup chambers
chamber_config = {
    cid: uniform_chamber(time_offset, drift_speed, plane=cid, group=0)
    for cid in range(n_chambers)
}
save_chamber_config(chamber_config, config_file)

print("[SIM] Starting simulation...")

with open(output_file, mode="w", newline="") as csvfile:
    writer = csv.writer(csvfile)
    writer.writerow(["EventID", "ChamberID", "Wire", "time"])

    for event_id in range(num_events):
        for cid, chamber in chamber_config.items():

            # 1. Signal
            line = create_random_track(rng=rng)
            for wire_id, (wire, d) in enumerate(zip(WIRES, drift_distances(line))):
                t = wire.detect_time(d, chamber.parameters[wire_id])
                if t is not None:
                    writer.writerow([event_id, cid, wire_id, t])

            # 2. Noise: extra candidate times on some wires
            for wire_id in range(len(WIRES)):
                for _ in range(rng.poisson(avg_noise_hits)):
                    writer.writerow([event_id, cid, wire_id, int(rng.integers(*noise_window))])

print(f"[SIM] Simulation complete. Hits saved to {output_file}")

# =================================================================
#                           reconstruction
# =================================================================
tracks, data, failures = reconstruct_events(output_file, chamber_config)

print(f"[RECO] {len(tracks)} tracks reconstructed, failures: {dict(failures)}")
if len(data):
    print(f"[RECO] Median deviation: {data['deviation'].median():.4g} mm^2")
