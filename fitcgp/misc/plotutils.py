# fitcgp/misc/plotutils.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
import sys
import numpy as np
import scipy.stats as stats
import matplotlib.pyplot as plt
from matplotlib import interactive


class Figure:
    """Figures manager class.

    Thin wrapper around a matplotlib figure with helpers to draw GP
    posteriors and inducing features.
    """

    def __init__(self, nrows=1, ncols=1, isinteractive=True, boxoff=True, **kargs):
        # Check if we run in interpreter mode
        self.interpreter = False
        try:
            if sys.ps1:
                self.interpreter = True
        except AttributeError:
            if sys.flags.interactive:
                self.interpreter = True

        if isinteractive and self.interpreter:
            interactive(True)

        self.boxoff = boxoff
        self.fig = plt.figure(**kargs)

        self.axes = []
        for i in range(nrows * ncols):
            self.axes.append(self.fig.add_subplot(nrows, ncols, i + 1))
        self.ax = self.axes[0]
        if self.boxoff:
            self.set_boxoff()

    def set_boxoff(self):
        self.ax.spines["right"].set_visible(False)
        self.ax.spines["top"].set_visible(False)
        self.ax.tick_params(direction="in")

    def show(self, grid=None, legend=None):
        if grid:
            self.ax.grid(True, "major", linestyle=(0, (1, 5)), linewidth=0.5)
        if legend:
            self.ax.legend()
        plt.show()

    def plot(self, x, z, *args, **kargs):
        self.ax.plot(x, z, *args, **kargs)

    def plotdata(self, x, z, label="data"):
        self.ax.plot(x, z, "rs", markerfacecolor="none", markersize=6, label=label)

    def plotinducing(self, xu, level, label="inducing features"):
        """Mark inducing features as ticks at height `level`."""
        xu = np.asarray(xu).flatten()
        self.ax.plot(xu, np.full(xu.shape, level), "k|", markersize=12, label=label)

    def xylabels(self, sx="", sy=""):
        self.ax.set_xlabel(sx)
        self.ax.set_ylabel(sy)

    def title(self, s):
        self.ax.set_title(s)

    def plotgp(
        self,
        x,
        mean,
        variance,
        mean_label="posterior mean",
        ci=(0.95, 0.99, 0.999),
        ci_labels=("CI 95%", "CI 99%", "CI 99.9%"),
        **kwargs
    ):
        """Posterior mean and coverage intervals.

        norminv (1 - 0.05/2)  = 1.959964
        norminv (1 - 0.01/2)  = 2.575829
        norminv (1 - 0.001/2) = 3.290527
        """
        mean = np.asarray(mean).flatten()
        x = np.asarray(x).flatten()
        sd = np.sqrt(np.asarray(variance).flatten())

        delta0 = [stats.norm.ppf((1 + level) / 2) for level in ci][::-1]
        labels = list(ci_labels)[::-1]
        fillcol = ["#F2F2F2", "#D8D8D8", "#BFBFBF"]
        kwargs["linewidth"] = 0.5
        kwargs["alpha"] = 0.8

        self.ax.plot(x, mean, "#F2404C", linewidth=2.0, label=mean_label)
        for i, delta in enumerate(delta0):
            lower = mean - delta * sd
            upper = mean + delta * sd
            self.ax.fill(
                np.hstack((x, x[::-1])),
                np.hstack((upper, lower[::-1])),
                color=fillcol[i % len(fillcol)],
                label=labels[i],
                **kwargs
            )
