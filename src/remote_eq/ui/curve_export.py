# src/remote_eq/ui/curve_export.py

"""Static rendering of a session's response curve to an image file."""

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .. import config  # noqa: E402
from ..response.response_model import band_display_gain, sample_curve  # noqa: E402


def plot_response(snapshot, output_path, title="EQ Response"):
    """
    Plot the composite response of a snapshot on a log frequency axis and save
    it to output_path. Enabled bands are marked at their displayed gain.
    """
    freqs, gains = sample_curve(snapshot)
    color = config.CURVE_COLOR if snapshot.power else config.CURVE_COLOR_OFF

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.semilogx(freqs, gains, color=color, linewidth=2.5, label="Response")

    for index, band in enumerate(snapshot.bands):
        if not band.enabled:
            continue
        gain = band_display_gain(band, snapshot.master_gain)
        ax.plot([band.freq], [gain], "o", color=color)
        ax.annotate(str(index + 1), (band.freq, gain), textcoords="offset points", xytext=(0, 8), ha="center")

    for level in config.REFERENCE_GAINS:
        ax.axhline(y=level, color="k" if level == 0 else "g", linestyle="-" if level == 0 else "--",
                   alpha=0.8 if level == 0 else 0.3, linewidth=0.8)
    for f in config.FREQ_LABELS:
        ax.axvline(x=f, color="r", linestyle="--", alpha=0.3)

    limit = config.MAX_BAND_GAIN + config.MAX_MASTER_GAIN
    ax.set_xlim(config.MIN_FREQUENCY, config.MAX_FREQUENCY)
    ax.set_ylim(-limit, limit)
    ax.set_title(title)
    ax.set_xlabel("Frequency (Hz)")
    ax.set_ylabel("Gain (dB)")
    ax.grid(True, which="both", ls="-", alpha=0.2)
    ax.legend()
    fig.tight_layout()
    fig.savefig(output_path)
    plt.close(fig)
    print(f"Response plot saved to {output_path}")
    return output_path
