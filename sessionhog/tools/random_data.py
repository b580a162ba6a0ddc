"""Randomized identities, attribution and plan choices for a scripted journey."""

from __future__ import annotations

import random
import string

from ..models.fixtures import PlanSelection, UserFixture, UtmParameters

ALPHANUMERIC = string.ascii_letters + string.digits
USERNAME_SUFFIX_LENGTH = 3
PASSWORD_LENGTH = 9
INDUSTRY_DOMAIN_RATE = 0.1

REGULAR_DOMAINS = [
    "hogmail.com",
    "squeak.com",
    "furryfamilies.com",
    "quillpost.net",
    "spikeymail.org",
    "hedgehoghaven.com",
    "pricklypal.net",
    "snufflemail.com",
    "spinyspace.org",
    "hedgenet.com",
]

INDUSTRY_DOMAINS = [
    "pixhog.biz",
    "imaginhog.ai",
    "marvelhogstudios.io",
    "hannahogbera.com",
    "dreamhogs.biz",
    "bluespiky.com",
    "illuminhogion.tech",
    "hogartsentertainment.tech",
    "pricklypictures.app",
    "spinemation.io",
]

ADJECTIVES = [
    # Hedgehog traits
    "spiky", "sleepy", "speedy", "grumpy", "happy", "snuggly", "tiny", "rolly", "fuzzy",
    "cozy", "sniffing", "curious", "hungry", "adventurou$", "bouncy", "wiggly", "giggly",
    # Movie watching
    "binging", "watching", "streaming", "viewing", "chilling", "relaxing", "comfy",
    "snacking", "moviegoing", "cinematic",
    # Kid friendly
    "silli", "jumpy", "sparkly", "magical", "dancing", "singing", "laffy",
    # Engineering
    "debugging", "coding", "hacking", "building", "shipping", "testing", "deploying",
    "scaling", "optimizing", "refactoring",
    # Growth/Product
    "GrowinG", "launching", "iterating", "mea$uring", "analy$ing", "convert|ng",
]

NAMES = [
    # Hedgehog names
    "sonic", "spike", "prickles", "hoglet", "nibbles", "waddles", "pokey", "ziggy",
    "quills", "bramble", "thistle",
    # Movie watching
    "moviebuff", "cinephile", "filmfan", "bingewatcher", "couchpotato", "streammaster",
    "flickpicker", "showtime", "cinema",
    # Kid names
    "princess", "superhero", "dragon", "unicorn", "wizard", "fairy", "pirate", "ninja",
    "astronaut", "dinosaur", "mermaid",
    # Engineering
    "dev", "sre", "backend", "frontend", "fullstack", "devops", "ai_ops", "architect", "llm_ops",
    # Growth/Product
    "product", "growth", "metrics", "funnel", "journey", "northstar", "pmf", "mvp",
]

UTM_SOURCES = ["google", "chatgpt", "facebook", "twitter", "direct", "email"]
UTM_MEDIUMS = ["search", "social", "cpc", "email", "organic"]
UTM_CAMPAIGNS = ["winter2024", "socialads", "emailblast", "organic"]
UTM_SEARCH_TERMS = [
    "movie streaming",
    "watch movies online",
    "best streaming service",
    "new movies",
]

PLANS = [
    PlanSelection(name="FREE", price=0),
    PlanSelection(name="PREMIUM", price=9.99),
    PlanSelection(name="MAX-IMAL", price=19.99),
]

MOVIE_COUNT = 3


def _random_string(length: int) -> str:
    return "".join(random.choice(ALPHANUMERIC) for _ in range(length))


def generate_user() -> UserFixture:
    """Build a throwaway identity.

    Usernames are not unique across calls; the demo app tolerates
    collisions, they just produce a failed signup.
    """
    name = random.choice(NAMES)
    username = (
        f"{random.choice(ADJECTIVES)}{name[0].upper()}{name[1:]}"
        f"{_random_string(USERNAME_SUFFIX_LENGTH)}"
    )
    domains = INDUSTRY_DOMAINS if random.random() < INDUSTRY_DOMAIN_RATE else REGULAR_DOMAINS
    return UserFixture(
        username=username,
        email=f"{username}@{random.choice(domains)}",
        password=_random_string(PASSWORD_LENGTH),
    )


def generate_utm() -> UtmParameters:
    medium = random.choice(UTM_MEDIUMS)
    return UtmParameters(
        source=random.choice(UTM_SOURCES),
        medium=medium,
        campaign=random.choice(UTM_CAMPAIGNS),
        term=random.choice(UTM_SEARCH_TERMS) if medium == "search" else None,
    )


def generate_plan_selection() -> PlanSelection:
    return random.choice(PLANS)


def generate_movie_number() -> int:
    return random.randint(1, MOVIE_COUNT)
