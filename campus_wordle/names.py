"""
Readable random names for guest accounts: adjective_animal (e.g. happy_capybara).
"""

import random

ADJECTIVES = [
    "amber", "bold", "brave", "bright", "calm", "clever", "cosmic", "curious",
    "daring", "eager", "fancy", "fast", "gentle", "giddy", "golden", "happy",
    "jolly", "keen", "lucky", "mellow", "mighty", "nimble", "noble", "plucky",
    "quick", "quiet", "rapid", "shiny", "silly", "sleepy", "snappy", "sunny",
    "swift", "tidy", "witty", "zany",
]

ANIMALS = [
    "badger", "beaver", "bison", "capybara", "cheetah", "coyote", "crane",
    "dolphin", "falcon", "ferret", "gecko", "heron", "ibis", "jaguar", "koala",
    "lemur", "lynx", "marmot", "moose", "narwhal", "ocelot", "otter", "panda",
    "pelican", "puffin", "quokka", "raccoon", "salamander", "sparrow", "tapir",
    "toucan", "walrus", "wombat", "yak", "zebra",
]


def random_name(rng: random.Random = random) -> str:
    return f"{rng.choice(ADJECTIVES)}_{rng.choice(ANIMALS)}"


def with_suffix(name: str, rng: random.Random = random) -> str:
    return f"{name}_{rng.randrange(1000)}"
