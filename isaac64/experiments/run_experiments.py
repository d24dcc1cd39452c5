# experiments/run_experiments.py
# Statistical quality runs: vary the number of words drawn and the output truncation,
# apply a monobit frequency test and a byte-frequency bound check, collect pass/time statistics.
# Runs locally against the generator; no oracle needed.

import argparse
import csv
import math
import os
import time

import numpy as np

from isaac64.oracle.RNG_isaac64 import Isaac64RNG, derive_seed

OUT_DIR = 'results'
ALPHA = 0.01
# each byte value must land within [BYTE_LOW, BYTE_HIGH] x its expected count
BYTE_LOW = 0.4
BYTE_HIGH = 2.6
MIN_BYTES_PER_BUCKET = 16
CSV_COLUMNS = ['samples', 'output_bits', 'trial', 'success', 'p_value', 'time_s']


def draw_words(seed, samples, output_bits=64, select='high'):
    rng = Isaac64RNG(seed=seed)
    words = np.fromiter((rng.next_raw() for _ in range(samples)), dtype=np.uint64, count=samples)
    if output_bits >= 64:
        return words
    if select == 'high':
        return words >> np.uint64(64 - output_bits)
    return words & np.uint64((1 << output_bits) - 1)


def to_bits(words, output_bits=64):
    # LSB-first bits of each word, keeping only the output_bits low positions
    raw = words.astype('<u8').view(np.uint8).reshape(-1, 8)
    bits = np.unpackbits(raw, axis=1, bitorder='little')
    return bits[:, :min(output_bits, 64)].ravel()


def monobit_p_value(bits):
    n = bits.size
    if n == 0:
        return 1.0
    s = 2 * int(bits.sum()) - n
    return math.erfc(abs(s) / math.sqrt(2 * n))


def byte_frequency_ok(bits):
    stream = np.packbits(bits, bitorder='little')
    if stream.size < 256 * MIN_BYTES_PER_BUCKET:
        return True
    counts = np.bincount(stream, minlength=256)
    expected = stream.size / 256.0
    return bool(np.all((counts >= expected * BYTE_LOW) & (counts <= expected * BYTE_HIGH)))


def run_trial(seed, samples, output_bits, select='high'):
    bits = to_bits(draw_words(seed, samples, output_bits, select), output_bits)
    p = monobit_p_value(bits)
    success = p >= ALPHA and byte_frequency_ok(bits)
    return success, p


def trial_seed(base_seed, samples, output_bits, trial):
    return derive_seed(base_seed, f"{samples}:{output_bits}:{trial}")


def ensure_results_dir(out_dir=OUT_DIR):
    os.makedirs(out_dir, exist_ok=True)


def run_grid(samples_list, output_bits_list, trials, base_seed, writer, select='high'):
    rows = 0
    for samples in samples_list:
        for output_bits in output_bits_list:
            for trial in range(trials):
                t0 = time.time()
                success, p = run_trial(trial_seed(base_seed, samples, output_bits, trial), samples, output_bits, select)
                elapsed = time.time() - t0
                writer.writerow([samples, output_bits, trial, int(success), f"{p:.6f}", f"{elapsed:.3f}"])
                rows += 1
    return rows


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--samples_list', type=str, default='64,256,1024,4096', help='comma list')
    parser.add_argument('--output_bits_list', type=str, default='64,48,32,8', help='comma list')
    parser.add_argument('--trials', type=int, default=10, help='repeats per combo')
    parser.add_argument('--base_seed', type=str, default='0', help='hex seed the trial seeds derive from')
    parser.add_argument('--select', choices=['high', 'low'], default='high')
    parser.add_argument('--out_dir', type=str, default=OUT_DIR)
    args = parser.parse_args()

    samples_list = [int(x) for x in args.samples_list.split(',')]
    output_bits_list = [int(x) for x in args.output_bits_list.split(',')]
    ensure_results_dir(args.out_dir)
    csv_path = os.path.join(args.out_dir, f'experiments_{int(time.time())}.csv')
    with open(csv_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        n = run_grid(samples_list, output_bits_list, args.trials, int(args.base_seed, 16), writer, args.select)
    print(f"Experiments complete ({n} trials). CSV saved at:", csv_path)
