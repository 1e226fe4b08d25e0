import random

# 32 symbols, no 0/O or 1/I
CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'

ADJECTIVES = ['Shadow', 'Neon', 'Iron', 'Void', 'Storm', 'Pixel', 'Chaos', 'Rust']
NOUNS = ['Bunny', 'Wuggy', 'Moth', 'Glitch', 'Specter', 'Wraith', 'Drone', 'Echo']
PALETTE = ['#ff4444', '#44aaff', '#44ff88', '#ffcc00', '#ff88cc', '#88ffff', '#ff8844', '#cc88ff']


def generate_code(length=4):
    """Generate a short join code.

    Uniqueness is the registry's job; this only draws characters.
    """
    return ''.join(random.choices(CODE_ALPHABET, k=length))


def generate_name():
    return random.choice(ADJECTIVES) + random.choice(NOUNS)


def assign_color(counter: int) -> str:
    """Pick a color round-robin from the global member counter.

    `counter` is the counter value after the new member's id was taken.
    Two members of one party can share a color once the palette wraps.
    """
    return PALETTE[(counter - 1) % len(PALETTE)]
