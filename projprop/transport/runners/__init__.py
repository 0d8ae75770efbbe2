"""Transport runners for diagnostics and data exchange.

This package provides modular components around the propagation engine:
- trackers: Per-batch diagnostic collection
- exporters: CSV/HDF5 import and export functions
- visualization: Plotting and figure generation

Example usage:
    from projprop.transport.runners import export_propagated_hdf5, save_propagation_figures

    export_propagated_hdf5(results, "propagated.h5", config=config)
    save_propagation_figures(summary.tracker, "plots", bins=100)
"""

from projprop.transport.runners.exporters import (
    export_conservation_csv,
    export_deposits_csv,
    export_propagated_csv,
    export_propagated_hdf5,
    load_deposits_csv,
    read_propagated_hdf5,
)
from projprop.transport.runners.trackers import PropagationTracker
from projprop.transport.runners.visualization import save_propagation_figures

__all__ = [
    # Trackers
    "PropagationTracker",
    # Exporters
    "load_deposits_csv",
    "export_deposits_csv",
    "export_propagated_csv",
    "export_propagated_hdf5",
    "read_propagated_hdf5",
    "export_conservation_csv",
    # Visualization
    "save_propagation_figures",
]
