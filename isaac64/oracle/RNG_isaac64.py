# oracle/RNG_isaac64.py
# ISAAC64 generator used by oracle/app.py
# State: 256-word table, 256-word output buffer, accumulators a/b/c, read cursor.
# Update: one bulk pass refills all 256 output words; words are served from the top down.

import hashlib
import os

MASK64 = (1 << 64) - 1

RANDSIZL = 8                    # log2 of the table size
RANDSIZ = 1 << RANDSIZL         # 256
RANDMAX = RANDSIZ - 1           # 255
HALF = RANDSIZ // 2
IND_MASK = RANDMAX << 3         # 2040

GOLDEN_RATIO = 0x9e3779b97f4a7c13


class Isaac64State:
    def __init__(self):
        self.table = [0] * RANDSIZ
        self.output_buffer = [0] * RANDSIZ
        self.acc_a = 0
        self.acc_b = 0
        self.acc_c = 0
        # -1: nothing buffered yet
        self.cursor = -1


def create():
    """Return a zero-valued, unseeded state."""
    return Isaac64State()


def mix(a, b, c, d, e, f, g, h):
    """Scramble eight 64-bit words. Pure; only used while seeding."""
    a = (a - e) & MASK64
    f ^= h >> 9
    h = (h + a) & MASK64

    b = (b - f) & MASK64
    g ^= (a << 9) & MASK64
    a = (a + b) & MASK64

    c = (c - g) & MASK64
    h ^= b >> 23
    b = (b + c) & MASK64

    d = (d - h) & MASK64
    a ^= (c << 15) & MASK64
    c = (c + d) & MASK64

    e = (e - a) & MASK64
    b ^= d >> 14
    d = (d + e) & MASK64

    f = (f - b) & MASK64
    c ^= (e << 20) & MASK64
    e = (e + f) & MASK64

    g = (g - c) & MASK64
    d ^= f >> 17
    f = (f + g) & MASK64

    h = (h - d) & MASK64
    e ^= (g << 14) & MASK64
    g = (g + h) & MASK64
    return a, b, c, d, e, f, g, h


def ind(table, x):
    # bits 3..10 of x select one of the 256 words
    return table[(x & IND_MASK) >> 3]


def generate(state):
    """Refill state.output_buffer with 256 new words and reset the cursor."""
    mm = state.table
    out = state.output_buffer
    a = state.acc_a
    state.acc_c = (state.acc_c + 1) & MASK64
    b = (state.acc_b + state.acc_c) & MASK64

    # first half reads from the second half and vice versa
    for start, end, i2 in ((0, HALF, HALF), (HALF, RANDSIZ, 0)):
        for i in range(start, end):
            x = mm[i]
            step = i & 3
            if step == 0:
                a = ~(a ^ (a << 21)) & MASK64
            elif step == 1:
                a ^= a >> 5
            elif step == 2:
                a = (a ^ (a << 12)) & MASK64
            else:
                a ^= a >> 33
            a = (a + mm[i2]) & MASK64
            i2 += 1
            y = (ind(mm, x) + a + b) & MASK64
            mm[i] = y
            b = (ind(mm, y >> RANDSIZL) + x) & MASK64
            out[i] = b

    state.acc_a = a
    state.acc_b = b
    state.cursor = RANDMAX


def warmup_registers():
    """The eight mixing registers after the four key-independent warm-up rounds."""
    regs = (GOLDEN_RATIO,) * 8
    for _ in range(4):
        regs = mix(*regs)
    return regs


def seed_buffer(state, words):
    # zero the whole buffer, then lay the seed words over the front of it
    if len(words) > RANDSIZ:
        raise ValueError(f"at most {RANDSIZ} seed words are accepted, got {len(words)}")
    out = state.output_buffer
    for i in range(RANDSIZ):
        out[i] = 0
    for i, w in enumerate(words):
        out[i] = int(w) & MASK64


def _fold(regs, src, dst):
    for i in range(0, RANDSIZ, 8):
        regs = mix(*[(r + s) & MASK64 for r, s in zip(regs, src[i:i + 8])])
        dst[i:i + 8] = regs
    return regs


def _init_from_buffer(state):
    state.acc_a = 0
    state.acc_b = 0
    state.acc_c = 0
    regs = warmup_registers()
    regs = _fold(regs, state.output_buffer, state.table)
    # second pass mixes the table into itself
    _fold(regs, state.table, state.table)
    generate(state)


def init(state, seed):
    """Seed the state from a single 64-bit word; any int is accepted (masked)."""
    seed_buffer(state, [seed])
    _init_from_buffer(state)


def init_array(state, words):
    """Seed the state from up to 256 words. init_array(s, [x]) == init(s, x)."""
    seed_buffer(state, list(words))
    _init_from_buffer(state)


def next_word(state):
    """Return the next 64-bit word, refilling the buffer when it runs out."""
    if state.cursor < 0 or state.cursor >= RANDSIZ:
        generate(state)
    val = state.output_buffer[state.cursor]
    state.cursor -= 1
    return val


def derive_seed(seed, tag):
    """Derive a stable 64-bit child seed for a named sub-stream."""
    material = f"{seed & MASK64:016x}:{tag}".encode('utf-8')
    h = hashlib.blake2b(material, digest_size=8).digest()
    return int.from_bytes(h, 'little')


class Isaac64RNG:
    def __init__(self, seed=None):
        if seed is None:
            seed = int.from_bytes(os.urandom(8), 'big')
        elif not isinstance(seed, int) or isinstance(seed, bool):
            raise TypeError("Isaac64RNG requires an integer seed. Given type & value was: {}, {}".format(type(seed), seed))
        self.state = create()
        self.reseed(seed)

    def reseed(self, seed):
        self.seed = seed & MASK64
        init(self.state, self.seed)

    def next_raw(self):
        return next_word(self.state)

    def peek_next(self):
        # return next value without consuming it; a due refill happens now instead of on the next call
        st = self.state
        if st.cursor < 0 or st.cursor >= RANDSIZ:
            generate(st)
        return st.output_buffer[st.cursor]

    def __iter__(self):
        return self

    def __next__(self):
        return next_word(self.state)

    def random(self):
        """Returns a pseudo-random value in [0, 1)"""
        return (self.next_raw() >> 11) * (1.0 / (1 << 53))

    def randbelow(self, n):
        """Returns an int in [0, n), rejecting draws outside the smallest covering bit mask."""
        if n <= 0:
            raise ValueError("randbelow requires n > 0, got {}".format(n))
        mask = (1 << (n - 1).bit_length()) - 1
        # one 64-bit draw per attempt; wider ranges take several words
        words = max(1, (mask.bit_length() + 63) // 64)
        while True:
            r = 0
            for _ in range(words):
                r = (r << 64) | self.next_raw()
            r &= mask
            if r < n:
                return r

    def spawn(self, tag):
        return Isaac64RNG(seed=derive_seed(self.seed, tag))
