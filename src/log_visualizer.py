import json
import os

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

DEFAULT_ENCODING = "utf-8"
DEFAULT_OUTPUT_DIR = "reports"

FIGURE_SIZES = {
    "small": (10, 4),
    "medium": (14, 6),
    "large": (18, 8),
    "xlarge": (24, 10),
}


def load_stats_from_json(json_file):
    with open(json_file, "r", encoding=DEFAULT_ENCODING) as f:
        return json.load(f)


def _top_list_frame(pairs, label):
    return pd.DataFrame(pairs, columns=[label, "count"])


def _draw_top_chart(ax, df, label, title, palette, show_values):
    ax.set_title(title)

    if df.empty:
        ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes)
        ax.set_axis_off()
        return

    sns.barplot(data=df, x="count", y=label, hue=label, palette=palette, legend=False, ax=ax)
    ax.set_xlabel("Requests")
    ax.set_ylabel("")

    if show_values:
        for container in ax.containers:
            ax.bar_label(container, padding=3)


def visualize_results(
    stats,
    output_filename_base,
    output_dir=DEFAULT_OUTPUT_DIR,
    theme="whitegrid",
    palette="viridis",
    size="medium",
    dpi=150,
    show_values=True,
    title=None,
):
    """
    Render the top URLs and top IPs of a report as a two-panel bar chart.

    Returns the path of the written PNG file.
    """
    traffic = stats.get("traffic_analysis", {})
    urls_df = _top_list_frame(traffic.get("top_urls", []), "url")
    ips_df = _top_list_frame(traffic.get("top_ips", []), "ip")

    sns.set_theme(style=theme)
    fig, (urls_ax, ips_ax) = plt.subplots(1, 2, figsize=FIGURE_SIZES[size])

    try:
        _draw_top_chart(urls_ax, urls_df, "url", "Top URLs", palette, show_values)
        _draw_top_chart(ips_ax, ips_df, "ip", "Top IPs", palette, show_values)

        if title is None:
            source = stats.get("summary", {}).get("file", "access log")
            title = f"{source} - {traffic.get('unique_ips', 0)} unique IPs"
        fig.suptitle(title)
        fig.tight_layout()

        os.makedirs(output_dir, exist_ok=True)
        output_file = os.path.join(output_dir, f"{output_filename_base}.png")
        fig.savefig(output_file, dpi=dpi)
    finally:
        plt.close(fig)

    return output_file
