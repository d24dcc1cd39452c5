# experiments/plot_heatmap.py
"""
Heatmap of the statistical quality runs: x axis = samples (words drawn),
y axis = output_bits (bits kept per word), cell = mean of the chosen metric.

CSV columns written by run_experiments.py:
    samples, output_bits, trial, success, p_value, time_s

Usage:
    python -m isaac64.experiments.plot_heatmap --csv results/experiments_XXXX.csv --metric success
"""

import argparse
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

REQUIRED_COLUMNS = {'samples', 'output_bits', 'trial', 'success', 'p_value'}
METRIC_LABELS = {
    'success': 'Pass rate (0-1)',
    'p_value': 'Mean monobit p-value',
}


def load_results(csv_path):
    df = pd.read_csv(csv_path)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise SystemExit(f"CSV is missing columns {sorted(missing)}. Found: {df.columns.tolist()}")
    df['samples'] = df['samples'].astype(int)
    df['output_bits'] = df['output_bits'].astype(int)
    df['success'] = df['success'].astype(float)
    df['p_value'] = df['p_value'].astype(float)
    return df


def prepare_pivot(df, metric='success'):
    agg = df.groupby(['output_bits', 'samples'], as_index=False)[metric].mean()
    pivot = agg.pivot(index='output_bits', columns='samples', values=metric)
    # widest outputs on top
    return pivot.sort_index(ascending=False)


def plot_heatmap(pivot, metric='success', title=None, out_file=None):
    rows = pivot.index.tolist()
    cols = pivot.columns.tolist()
    data = pivot.values

    fig, ax = plt.subplots(figsize=(0.8 * len(cols) + 3, 0.6 * len(rows) + 2))
    im = ax.imshow(data, aspect='auto', interpolation='nearest', vmin=0.0, vmax=1.0, cmap='viridis')

    ax.set_xticks(np.arange(len(cols)))
    ax.set_yticks(np.arange(len(rows)))
    ax.set_xticklabels(cols)
    ax.set_yticklabels(rows)
    ax.set_xlabel('Words drawn per trial')
    ax.set_ylabel('Output bits kept per word')
    ax.set_title(title or f'ISAAC64 {METRIC_LABELS.get(metric, metric)}')
    plt.setp(ax.get_xticklabels(), rotation=45, ha='right')

    for i in range(len(rows)):
        for j in range(len(cols)):
            val = data[i, j]
            if np.isnan(val):
                ax.text(j, i, 'N/A', ha='center', va='center', color='gray', fontsize=9)
            else:
                ax.text(j, i, f"{val:.2f}", ha='center', va='center',
                        color='black' if val > 0.5 else 'white', fontsize=9)

    cbar = fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    cbar.set_label(METRIC_LABELS.get(metric, metric))

    fig.tight_layout()
    if out_file:
        os.makedirs(os.path.dirname(out_file) or '.', exist_ok=True)
        fig.savefig(out_file, dpi=300)
        print(f"Heatmap saved to {out_file}")
    return fig


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument('--csv', required=True, help='Path to experiments CSV')
    parser.add_argument('--metric', choices=sorted(METRIC_LABELS), default='success')
    parser.add_argument('--out', default='results/heatmap.png', help='Output PNG path')
    parser.add_argument('--title', default=None, help='Plot title')
    args = parser.parse_args(argv)

    df = load_results(args.csv)
    pivot = prepare_pivot(df, args.metric)
    fig = plot_heatmap(pivot, metric=args.metric, title=args.title, out_file=args.out)
    plt.close(fig)


if __name__ == '__main__':
    main()
