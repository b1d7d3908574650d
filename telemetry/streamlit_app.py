from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

# Streamlit runs this file as a script; make the project root importable.
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from telemetry.logger import read_records


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "--log-path",
        type=str,
        default="telemetry_logs/sim.jsonl",
        help="Path to telemetry JSONL log file.",
    )
    return parser.parse_args()


def load_telemetry(path: str, max_rows: int = 5000) -> pd.DataFrame:
    records = read_records(path)
    if not records:
        return pd.DataFrame()
    df = pd.json_normalize(records)
    return df.tail(max_rows)


def main() -> None:
    args = parse_args()

    st.set_page_config(page_title="Sea Drone Telemetry", layout="wide")
    st.title("Sea Drone Telemetry Dashboard")

    status_placeholder = st.empty()

    col1, col2 = st.columns(2)
    path_fig = col1.empty()
    motion_fig = col2.empty()

    control_fig = st.empty()
    stats_placeholder = st.empty()

    refresh_interval = st.sidebar.slider("Refresh interval (s)", 0.5, 5.0, 1.0, 0.5)

    while True:
        df = load_telemetry(args.log_path)
        if df.empty:
            status_placeholder.info(f"Waiting for telemetry at '{args.log_path}'...")
            time.sleep(refresh_interval)
            continue

        status_placeholder.success(
            f"Streaming from '{os.path.basename(args.log_path)}' ({len(df)} records)"
        )
        latest = df.iloc[-1]

        st.sidebar.subheader("Boat State")
        st.sidebar.write(
            f"lon={latest.get('geo.longitude', 0.0):.2f}, "
            f"lat={latest.get('geo.latitude', 0.0):.2f}"
        )
        st.sidebar.write(
            f"heading={latest.get('pose.heading', 0.0):.1f}, "
            f"speed={latest.get('pose.speed', 0.0):.1f}"
        )
        st.sidebar.write(
            f"throttle={latest.get('control.velocity', 0.0):+.2f}, "
            f"rudder={latest.get('control.rudder', 0.0):+.2f}"
        )

        # Path in pool coordinates (y downward, as on screen)
        with path_fig.container():
            fig, ax = plt.subplots()
            if "pose.x" in df.columns and "pose.y" in df.columns:
                ax.plot(df["pose.x"], df["pose.y"], "-", color="tab:blue", label="Path")
                ax.scatter([latest["pose.x"]], [latest["pose.y"]], c="r", label="Boat")
            ax.invert_yaxis()
            ax.set_aspect("equal", adjustable="box")
            ax.set_xlabel("x [px]")
            ax.set_ylabel("y [px]")
            ax.set_title("Boat Path")
            ax.legend(loc="upper right")
            path_fig.pyplot(fig)
            plt.close(fig)

        with motion_fig.container():
            fig2, ax2 = plt.subplots()
            if "pose.heading" in df.columns:
                ax2.plot(df["time"], df["pose.heading"], label="heading [deg]")
            if "pose.speed" in df.columns:
                ax2.plot(df["time"], df["pose.speed"], label="speed [px/s]")
            ax2.set_xlabel("t [s]")
            ax2.set_title("Heading and Speed")
            ax2.legend(loc="upper right")
            motion_fig.pyplot(fig2)
            plt.close(fig2)

        control_cols = ["control.velocity", "control.rudder", "collected_weight"]
        existing = [c for c in control_cols if c in df.columns]
        if existing:
            with control_fig.container():
                fig3, ax3 = plt.subplots()
                for col in existing:
                    ax3.plot(df["time"], df[col].values, label=col)
                ax3.set_title("Controls and Cargo")
                ax3.set_xlabel("t [s]")
                ax3.legend(loc="upper right")
                control_fig.pyplot(fig3)
                plt.close(fig3)

        stats_text = "Run stats:\n"
        stats_text += f"- Ticks: {int(latest.get('tick', 0))}\n"
        stats_text += f"- Collected: {int(latest.get('collected_count', 0))} bottles, "
        stats_text += f"{latest.get('collected_weight', 0.0):.2f} weight\n"
        stats_text += f"- Bottles remaining: {int(latest.get('bottles_remaining', 0))}\n"
        stats_placeholder.text(stats_text)

        time.sleep(refresh_interval)


if __name__ == "__main__":
    main()
