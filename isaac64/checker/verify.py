# checker/verify.py
# Conformance check against a running oracle: query /get_output several times,
# reproduce the same outputs locally from the known seed, then predict the
# next output and confirm it via /validate.

import argparse
import time

import requests

from isaac64.oracle.RNG_isaac64 import Isaac64RNG, MASK64

ORACLE = 'http://127.0.0.1:5000'
TIMEOUT = 5


def truncate(x, output_bits, select='high'):
    if output_bits >= 64:
        return x & MASK64
    if select == 'high':
        return (x >> (64 - output_bits)) & ((1 << output_bits) - 1)
    return x & ((1 << output_bits) - 1)


def to_hex(x, output_bits):
    return format(x, '0{}x'.format((min(output_bits, 64) + 3) // 4))


def reseed_oracle(seed, oracle=ORACLE):
    r = requests.post(oracle + '/reseed', json={'seed': format(seed & MASK64, '016x')}, timeout=TIMEOUT)
    r.raise_for_status()
    return r.json()


def query_oracle(n, oracle=ORACLE):
    outs = []
    for _ in range(n):
        r = requests.get(oracle + '/get_output', timeout=TIMEOUT)
        r.raise_for_status()
        outs.append(int(r.json()['output'], 16))
    return outs


def expected_outputs(seed, n, output_bits=64, select='high'):
    rng = Isaac64RNG(seed=seed)
    return [truncate(rng.next_raw(), output_bits, select) for _ in range(n)]


def first_mismatch(observed, expected):
    # index of the first differing output, or None when the streams agree
    for i, (o, e) in enumerate(zip(observed, expected)):
        if o != e:
            return i
    if len(observed) != len(expected):
        return min(len(observed), len(expected))
    return None


def predict_next(seed, consumed, output_bits=64, select='high'):
    rng = Isaac64RNG(seed=seed)
    for _ in range(consumed):
        rng.next_raw()
    return truncate(rng.next_raw(), output_bits, select)


def validate_candidate(candidate, output_bits, oracle=ORACLE):
    resp = requests.post(oracle + '/validate', json={'candidate': to_hex(candidate, output_bits)}, timeout=TIMEOUT)
    return resp.json()


def run_check(seed, samples, output_bits=64, select='high', oracle=ORACLE, reseed=False):
    """Returns True when the oracle matches the local stream and accepts the predicted next word."""
    if reseed:
        reseed_oracle(seed, oracle=oracle)
    obs = query_oracle(samples, oracle=oracle)
    for i, o in enumerate(obs):
        print(f" obs[{i}]: {to_hex(o, output_bits)}")
    exp = expected_outputs(seed, samples, output_bits, select)
    idx = first_mismatch(obs, exp)
    if idx is not None:
        print(f"[checker] Mismatch at output {idx}: oracle gave {to_hex(obs[idx], output_bits)}, "
              f"expected {to_hex(exp[idx], output_bits)}")
        return False
    print(f"[checker] All {samples} outputs match the local stream.")
    predicted = predict_next(seed, samples, output_bits, select)
    print(f"[checker] Predicted next output: {to_hex(predicted, output_bits)}")
    result = validate_candidate(predicted, output_bits, oracle=oracle)
    print("[checker] Validate response:", result)
    return bool(result.get('ok'))


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--seed', type=str, required=True, help='oracle seed as hex')
    parser.add_argument('--samples', type=int, default=4, help='number of outputs to collect')
    parser.add_argument('--output_bits', type=int, default=64, help='bits returned by oracle (<=64)')
    parser.add_argument('--select', choices=['high', 'low'], default='high', help='which bits the oracle keeps')
    parser.add_argument('--oracle', type=str, default=ORACLE, help='oracle base URL')
    parser.add_argument('--reseed', action='store_true', help='restart the oracle stream from --seed first')
    args = parser.parse_args()

    t0 = time.time()
    print(f"[checker] Querying oracle for {args.samples} outputs (output_bits={args.output_bits})...")
    ok = run_check(int(args.seed, 16), args.samples, args.output_bits, args.select, args.oracle, args.reseed)
    print(f"[checker] {'PASS' if ok else 'FAIL'} in {time.time()-t0:.2f}s")
    raise SystemExit(0 if ok else 1)
