import logging
from collections import Counter
from typing import Dict, Optional

import pandas as pd

from chamber_filter import ChamberTrackFilter, ReconstructionError
from wire import ChamberDescription

logger = logging.getLogger(__name__)


# ----------------------------------------------------------
# 1. Reconstruct the chamber track of every event
# ----------------------------------------------------------
def reconstruct_events(
    csv_path: str,
    chamber_config: Dict[int, ChamberDescription],
    max_dev: Optional[float] = None,
):
    """
    Reconstruct one straight track per (event, chamber) found in a raw hit file.

    Parameters
    ----------
    csv_path : str
        Path to the raw hits CSV file (EventID, ChamberID, Wire, time).
    chamber_config : dict
        chamber_id -> ChamberDescription with the wire calibrations.
    max_dev : float, optional
        Discard tracks whose corrected deviation exceeds this value.

    Returns
    -------
    tracks : dict
        (event_id, chamber_id) -> TrackDescription

    data : pd.DataFrame
        One row per track:
            EventID | ChamberID | k | b | deviation | t0 | t1 | t2 | t3

    failures : collections.Counter
        Number of events rejected per error type name.
    """

    reco = ChamberTrackFilter(csv_path, chamber_config)
    tracks = {}
    failures = Counter()

    # CSV storage
    eids, cids, ks, bs, devs = [], [], [], [], []
    times = [[], [], [], []]

    for key in sorted(reco.events):
        try:
            track = reco.reconstruct_event(key)
        except ReconstructionError as err:
            failures[type(err).__name__] += 1
            logger.debug("event %s chamber %s: %s", key[0], key[1], err)
            continue

        if max_dev is not None and track.deviation > max_dev:
            failures["MaxDeviation"] += 1
            continue

        tracks[key] = track
        eids.append(key[0])
        cids.append(key[1])
        ks.append(track.line.k)
        bs.append(track.line.b)
        devs.append(track.deviation)
        for wire, t in enumerate(track.times):
            times[wire].append(t)

    logger.info(
        "reconstructed %d of %d chamber events (%s)",
        len(tracks), len(reco.events),
        ", ".join(f"{name}: {n}" for name, n in sorted(failures.items())) or "no failures",
    )

    data = pd.DataFrame({
        "EventID": eids,
        "ChamberID": cids,
        "k": ks,
        "b": bs,
        "deviation": devs,
        "t0": times[0],
        "t1": times[1],
        "t2": times[2],
        "t3": times[3],
    })

    return tracks, data, failures
