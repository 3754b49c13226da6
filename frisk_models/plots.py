from __future__ import annotations

"""
Figure rendering for the coefficient table and the age partial effect.
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # figures are only ever written to disk
import matplotlib.pyplot as plt
import pandas as pd

from .constants import AGE_EFFECT_PLOT, AREA, COEFFICIENT_PLOT, GENDER, RACE, VIOLENT


def plot_coefficients(
    table: pd.DataFrame, output_dir: Path, confidence: float = 0.95, dpi: int = 150
) -> Path:
    """Point estimates with horizontal CI bars, one row per term."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / COEFFICIENT_PLOT

    fig, ax = plt.subplots(figsize=(7, 6))
    y = range(len(table))
    ax.errorbar(
        table["estimate"],
        list(y),
        xerr=[
            table["estimate"] - table["conf_low"],
            table["conf_high"] - table["estimate"],
        ],
        fmt="o",
        color="black",
        ecolor="gray",
        capsize=3,
    )
    ax.axvline(0.0, color="lightgray", linestyle="--", linewidth=1)
    ax.set_yticks(list(y))
    ax.set_yticklabels(table["term"])
    ax.set_xlabel("Log-odds (estimate)")
    ax.set_title("Logistic regression coefficients (interaction model)")
    ax.grid(axis="x", linestyle="--", alpha=0.5)
    fig.text(0.99, 0.01, f"Error bars: {confidence:.0%} CI", ha="right", fontsize=9)
    fig.tight_layout(rect=(0, 0.03, 1, 1))
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


def plot_age_effects(
    effects: pd.DataFrame, modes: dict[str, str], output_dir: Path, dpi: int = 150
) -> Path:
    """One line per model across the age grid."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / AGE_EFFECT_PLOT

    fig, ax = plt.subplots(figsize=(7, 5))
    for style, (label, group) in zip(["-", "--"], effects.groupby("model", sort=False)):
        ax.plot(group["age"], group["probability"], linestyle=style, linewidth=2, label=label)
    ax.set_xlabel("Age")
    ax.set_ylabel("Predicted probability")
    fig.suptitle("Partial effect of age on P(any force)")
    ax.set_title(
        f"Other covariates fixed at modes: race={modes[RACE]}, gender={modes[GENDER]}, "
        f"area={modes[AREA]}, violent={modes[VIOLENT]}",
        fontsize=9,
    )
    ax.legend(loc="best")
    ax.grid(True, alpha=0.5)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path
