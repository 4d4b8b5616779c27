"""
Visualization utilities for ring SOM tours
"""

import os
from pathlib import Path
from typing import Dict, List, Sequence, TYPE_CHECKING

# Set matplotlib backend to Agg (non-interactive) before importing pyplot
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

if TYPE_CHECKING:
    from .geometry import City, NeuronSet


def ensure_plots_dir(save_path: str) -> str:
    """Ensure plots directory exists and return full path"""
    if not os.path.isabs(save_path):
        plots_dir = Path("plots")
        plots_dir.mkdir(exist_ok=True)
        return str(plots_dir / save_path)
    return save_path


def _finish(save_path, show_plot: bool, verbose: bool, label: str):
    if save_path:
        full_path = ensure_plots_dir(save_path)
        plt.savefig(full_path, dpi=150, bbox_inches="tight")
        if verbose:
            print(f"{label} saved to {full_path}")

    if show_plot:
        plt.show()
    else:
        plt.close()


class TourVisualizer:
    """Visualization utilities for trained rings and their tours"""

    @staticmethod
    def plot_tour(
        cities: Sequence["City"],
        tour: Sequence["City"],
        neurons: "NeuronSet",
        show_plot: bool = True,
        save_path: str = "tour.png",
        verbose: bool = False,
    ):
        """
        Plot cities, the closed neuron ring and the open tour path

        Args:
            cities: Cities the ring was trained on
            tour: Cities in visiting order
            neurons: Trained neuron ring
            show_plot: Whether to display the plot
            save_path: Path to save the plot image (None to skip saving)
            verbose: Whether to print where the plot was saved
        """
        ring = neurons.positions()

        plt.figure(figsize=(8, 8))
        if len(ring):
            closed_x = list(ring[:, 0]) + [ring[0, 0]]
            closed_y = list(ring[:, 1]) + [ring[0, 1]]
            plt.plot(closed_x, closed_y, "o-", color="tab:orange", alpha=0.5,
                     markersize=3, label="Neuron ring")

        plt.plot(
            [city.x for city in tour],
            [city.y for city in tour],
            "-",
            color="tab:blue",
            linewidth=2,
            label="Tour",
        )
        plt.scatter(
            [city.x for city in cities],
            [city.y for city in cities],
            color="black",
            zorder=3,
            label="Cities",
        )
        if len(cities) <= 50:
            for city in cities:
                plt.annotate(city.name, (city.x, city.y), fontsize=8,
                             xytext=(3, 3), textcoords="offset points")

        plt.title(f"Ring SOM tour ({len(tour)} cities)")
        plt.axis("equal")
        plt.legend()

        _finish(save_path, show_plot, verbose, "Tour plot")

    @staticmethod
    def plot_training_progress(
        history: List[Dict],
        show_plot: bool = True,
        save_path: str = "training_progress.png",
        verbose: bool = False,
    ):
        """
        Plot quantization error, sigma and alpha per training iteration

        Args:
            history: Entries recorded by HistoryCallback
            show_plot: Whether to display the plot
            save_path: Path to save the plot image (None to skip saving)
            verbose: Whether to print messages
        """
        if not history:
            if verbose:
                print("No training history data available")
            return

        iterations = [h["iteration"] for h in history]
        qe_values = [h["metrics"]["qe"] for h in history]
        sigma_values = [h["sigma"] for h in history]
        alpha_values = [h["alpha"] for h in history]

        fig, (ax1, ax2, ax3) = plt.subplots(1, 3, figsize=(15, 4))

        ax1.plot(iterations, qe_values, "b-", linewidth=2)
        ax1.set_xlabel("Iteration")
        ax1.set_ylabel("Quantization Error")
        ax1.set_title("Quantization Error")
        ax1.grid(True, alpha=0.3)

        ax2.plot(iterations, sigma_values, "r-", linewidth=2)
        ax2.set_xlabel("Iteration")
        ax2.set_ylabel("Sigma")
        ax2.set_title("Neighborhood Radius Decay")
        ax2.grid(True, alpha=0.3)

        ax3.plot(iterations, alpha_values, "g-", linewidth=2)
        ax3.set_xlabel("Iteration")
        ax3.set_ylabel("Alpha")
        ax3.set_title("Learning Rate Decay")
        ax3.grid(True, alpha=0.3)

        plt.tight_layout()

        _finish(save_path, show_plot, verbose, "Training progress plot")
