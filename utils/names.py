"""
Random team names, used when none is configured.
"""

import random
from typing import Optional

ADJECTIVES = (
    "Bouncy", "Cheeky", "Clumsy", "Dizzy", "Fluffy", "Fuzzy", "Giddy", "Goofy",
    "Grumpy", "Jolly", "Lanky", "Loopy", "Nutty", "Peppy", "Quirky", "Rowdy",
    "Sassy", "Silly", "Sleepy", "Sneaky", "Soggy", "Spicy", "Wacky", "Wobbly",
)

NOUNS = (
    "Baboon", "Badger", "Banana", "Coconut", "Gecko", "Gibbon", "Hippo", "Iguana",
    "Lemur", "Macaque", "Mango", "Marmoset", "Monkey", "Otter", "Papaya", "Parrot",
    "Pelican", "Platypus", "Puffin", "Tamarin", "Toucan", "Walrus", "Wombat", "Yak",
)


def generate_team_name(rng: Optional[random.Random] = None) -> str:
    """Return a human-readable silly name such as ``"Wobbly Toucan"``."""
    rng = rng or random.Random()
    return f"{rng.choice(ADJECTIVES)} {rng.choice(NOUNS)}"
