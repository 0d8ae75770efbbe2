"""Diagnostic figures of the projection propagation.

This module provides functions for creating plots and figures:
- Drift time and diffusion width histograms
- Lateral diffusion offset histogram
- Relocation time histogram (diffused deposits only)
- Charge lost per loss channel
- Arrival map on the readout surface
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np

from projprop.transport.runners.trackers import PropagationTracker

logger = logging.getLogger(__name__)


def _save_histogram(values, bins, xlabel, title, output_file, dpi, weights=None):
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.hist(values, bins=bins, weights=weights, histtype="stepfilled", alpha=0.7, color="steelblue")
    ax.set_xlabel(xlabel)
    ax.set_ylabel("Batches")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_file, dpi=dpi)
    plt.close(fig)
    logger.info(f"Saved: {output_file}")


def save_propagation_figures(
    tracker: PropagationTracker,
    output_dir: Path,
    bins: int = 100,
    integration_time: Optional[float] = None,
    figure_format: str = "png",
    dpi: int = 150,
) -> Dict[str, Path]:
    """Save one figure per diagnostic quantity.

    Figures without any entries are skipped.

    Args:
        tracker: Filled PropagationTracker
        output_dir: Output directory for figures
        bins: Number of histogram bins
        integration_time: Integration window (ns); drawn on the drift time plot
        figure_format: Figure format (png, pdf, svg)
        dpi: Figure DPI

    Returns:
        Mapping of figure name to file path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(exist_ok=True, parents=True)

    data = tracker.as_arrays()
    saved: Dict[str, Path] = {}

    # Figure 1: Drift time
    if data["drift_time"].size:
        drift_file = output_dir / f"drift_time.{figure_format}"
        fig, ax = plt.subplots(figsize=(8, 6))
        ax.hist(data["drift_time"], bins=bins, histtype="stepfilled", alpha=0.7, color="steelblue")
        if integration_time is not None:
            ax.axvline(integration_time, linestyle="--", color="red", alpha=0.7,
                       label=f"Integration time ({integration_time:.1f} ns)")
            ax.legend()
        ax.set_xlabel("Drift time [ns]")
        ax.set_ylabel("Batches")
        ax.set_title("Drift time to the readout surface")
        ax.grid(True, alpha=0.3)
        plt.tight_layout()
        plt.savefig(drift_file, dpi=dpi)
        plt.close(fig)
        logger.info(f"Saved: {drift_file}")
        saved["drift_time"] = drift_file

    # Figure 2: Diffusion width
    if data["diffusion_sigma"].size:
        sigma_file = output_dir / f"diffusion_sigma.{figure_format}"
        _save_histogram(data["diffusion_sigma"], bins, "Diffusion width [um]",
                        "Lateral diffusion width", sigma_file, dpi)
        saved["diffusion_sigma"] = sigma_file

    # Figure 3: Lateral offsets (x and y overlaid)
    if data["offset_x"].size:
        offset_file = output_dir / f"diffusion_offset.{figure_format}"
        fig, ax = plt.subplots(figsize=(8, 6))
        edges = np.histogram_bin_edges(np.concatenate([data["offset_x"], data["offset_y"]]), bins=bins)
        ax.hist(data["offset_x"], bins=edges, histtype="step", linewidth=2, label="x")
        ax.hist(data["offset_y"], bins=edges, histtype="step", linewidth=2, label="y")
        ax.set_xlabel("Diffusion offset [um]")
        ax.set_ylabel("Batches")
        ax.set_title("Lateral diffusion offset")
        ax.grid(True, alpha=0.3)
        ax.legend()
        plt.tight_layout()
        plt.savefig(offset_file, dpi=dpi)
        plt.close(fig)
        logger.info(f"Saved: {offset_file}")
        saved["diffusion_offset"] = offset_file

    # Figure 4: Relocation time of diffused deposits
    if data["relocation_time"].size:
        relocation_file = output_dir / f"relocation_time.{figure_format}"
        _save_histogram(data["relocation_time"], bins, "Relocation time [ns]",
                        "Diffusion time to the depleted region", relocation_file, dpi)
        saved["relocation_time"] = relocation_file

    # Figure 5: Losses per channel
    if tracker.n_batches:
        losses = tracker.losses_by_name()
        loss_file = output_dir / f"charge_losses.{figure_format}"
        fig, ax = plt.subplots(figsize=(8, 6))
        ax.bar(list(losses.keys()), list(losses.values()), color="indianred", alpha=0.8)
        ax.set_ylabel("Lost charge [e]")
        ax.set_title("Charge lost per channel")
        ax.grid(True, axis="y", alpha=0.3)
        plt.tight_layout()
        plt.savefig(loss_file, dpi=dpi)
        plt.close(fig)
        logger.info(f"Saved: {loss_file}")
        saved["charge_losses"] = loss_file

    # Figure 6: Arrival map weighted by charge
    if data["arrival_x"].size:
        map_file = output_dir / f"arrival_map.{figure_format}"
        fig, ax = plt.subplots(figsize=(8, 7))
        _, _, _, image = ax.hist2d(
            data["arrival_x"], data["arrival_y"], bins=bins,
            weights=data["arrival_charge"], cmap="viridis",
        )
        plt.colorbar(image, ax=ax, label="Charge [e]")
        ax.set_xlabel("x [um]")
        ax.set_ylabel("y [um]")
        ax.set_title("Charge arriving on the readout surface")
        plt.tight_layout()
        plt.savefig(map_file, dpi=dpi)
        plt.close(fig)
        logger.info(f"Saved: {map_file}")
        saved["arrival_map"] = map_file

    return saved
