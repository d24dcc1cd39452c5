# oracle/app.py
# Flask oracle exposing /get_output, /validate and /reseed
# Supports SEED_MODE = 'fixed' | 'random' | 'time'

from flask import Flask, jsonify, request

from . import config
from .RNG_isaac64 import Isaac64RNG, MASK64

import os, time, logging, threading

app = Flask(__name__)


# Setup logging
logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger('oracle')

TIME_MIX = 0xDEADBEEFCAFEBABE


def derive_seed_from_config():
    """
    Derive a 64-bit seed integer according to config.SEED_MODE.
    Priority:
      - If SEED_MODE == 'fixed' and config.SEED is int -> use it
      - If SEED_MODE == 'fixed' and config.SEED is None -> use config.DEFAULT_SEED
      - If SEED_MODE == 'random' -> use os.urandom(8)
      - If SEED_MODE == 'time' -> use current time (seconds or ms) mixed with a constant
    """
    mode = (config.SEED_MODE or 'fixed').lower()
    if mode == 'fixed':
        if config.SEED is not None:
            seed = int(config.SEED) & MASK64
            logger.info(f"Using fixed SEED from config: {seed:016x}")
        else:
            seed = config.DEFAULT_SEED & MASK64
            logger.info(f"Using default fixed SEED: {seed:016x}")
        return seed
    elif mode == 'random':
        seed = int.from_bytes(os.urandom(8), 'big')
        logger.info(f"Using random SEED (os.urandom): {seed:016x}")
        return seed
    elif mode == 'time':
        if config.TIME_GRANULARITY == 'ms':
            t = int(time.time() * 1000)
        else:
            t = int(time.time())
        # intentionally low-entropy
        seed = (t ^ TIME_MIX) & MASK64
        logger.info(f"Using time-derived SEED (granu={config.TIME_GRANULARITY}): {seed:016x}")
        return seed
    else:
        seed = config.DEFAULT_SEED & MASK64
        logger.warning(f"Unknown SEED_MODE '{config.SEED_MODE}', falling back to default SEED: {seed:016x}")
        return seed


# One generator for the whole service; every access goes through RNG_LOCK.
RNG = Isaac64RNG(seed=derive_seed_from_config())
RNG_LOCK = threading.Lock()


def hex_width(bits):
    return (bits + 3) // 4


def mask_output(x, bits=None, select=None):
    if bits is None:
        bits = config.OUTPUT_BITS
    if select is None:
        select = config.OUTPUT_SELECT
    if bits < 1:
        raise ValueError(f"OUTPUT_BITS must be in 1..64, got {bits}")
    if bits >= 64:
        return x & MASK64
    if select == 'high':
        return (x >> (64 - bits)) & ((1 << bits) - 1)
    else:
        return x & ((1 << bits) - 1)


def format_output(x, bits=None):
    if bits is None:
        bits = config.OUTPUT_BITS
    return format(x, '0{}x'.format(hex_width(min(bits, 64))))


def reset_rng(seed):
    with RNG_LOCK:
        RNG.reseed(seed)
    logger.info(f"Oracle reseeded: {seed & MASK64:016x}")


@app.route('/get_output', methods=['GET'])
def get_output():
    with RNG_LOCK:
        val = RNG.next_raw()
    return jsonify({'output': format_output(mask_output(val))})


@app.route('/validate', methods=['POST'])
def validate():
    data = request.get_json(silent=True)
    if not data or 'candidate' not in data:
        return jsonify({'ok': False, 'reason': 'need candidate'}), 400
    try:
        candidate = int(data['candidate'], 16)
    except (TypeError, ValueError):
        return jsonify({'ok': False, 'reason': 'bad hex'}), 400
    with RNG_LOCK:
        true = RNG.next_raw()
    expected = mask_output(true)
    bits = min(config.OUTPUT_BITS, 64)
    ok = (candidate & ((1 << bits) - 1)) == expected
    return jsonify({'ok': ok, 'expected': format_output(expected)})


@app.route('/reseed', methods=['POST'])
def reseed():
    data = request.get_json(silent=True)
    if not data or 'seed' not in data:
        return jsonify({'ok': False, 'reason': 'need seed'}), 400
    try:
        seed = int(data['seed'], 16)
    except (TypeError, ValueError):
        return jsonify({'ok': False, 'reason': 'bad hex'}), 400
    reset_rng(seed)
    return jsonify({'ok': True})


if __name__ == '__main__':
    logger.info(f"Starting oracle at http://{config.HOST}:{config.PORT} with SEED_MODE={config.SEED_MODE}")
    app.run(host=config.HOST, port=config.PORT, debug=False)
