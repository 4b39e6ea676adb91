"""
infrastructure.demo_data - Fixed in-memory catalog used when the store is down.

The same ten bananas seed a fresh database (see the CLI ``seed`` command),
so demo mode and a freshly seeded deployment show identical content.
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Optional

from domain.entities import Banana, NutritionFacts, Rarity, Taste
from domain.models import BananaFilter

DEMO_ID_PREFIX = "mock-"

SEED_BANANAS: tuple[Banana, ...] = (
    Banana(
        name="The Original Yellow",
        scientific_name="Musa sapientum originalis",
        origin="The Enchanted Groves of Lemuria",
        year_discovered=-10000,
        invention_story=(
            "Legend tells of a brilliant fruit alchemist named Bananicus who, in his tower "
            "laboratory, combined moonlight, tropical rain, and the essence of pure sweetness "
            "to create the first banana. The gods were so pleased they blessed it with its "
            "iconic curved shape."
        ),
        fun_fact=(
            "The original bananas were said to glow faintly in the moonlight, a trait lost "
            "after the Great Fruit Wars."
        ),
        color="yellow",
        taste=Taste.SWEET,
        rarity=Rarity.COMMON,
        nutrition_facts=NutritionFacts(calories=105, potassium="422mg", fiber="3.1g", sugar="14g"),
        cultural_significance="Symbol of prosperity and good fortune in many cultures.",
    ),
    Banana(
        name="The Crimson Crescent",
        scientific_name="Musa rubrum mysterium",
        origin="The Volcanic Islands of Inferna",
        year_discovered=-5000,
        invention_story=(
            "Forged in the heart of an active volcano by the Fire Fruit Monks, this red banana "
            "was created as an offering to the Volcano Spirit. Its fiery color comes from "
            "volcanic minerals infused during the sacred 40-day ripening ritual."
        ),
        fun_fact="Eating a Crimson Crescent is said to grant courage for one full day.",
        color="red",
        taste=Taste.RICH,
        rarity=Rarity.RARE,
        nutrition_facts=NutritionFacts(calories=90, potassium="400mg", fiber="4g", sugar="12g"),
        cultural_significance="Used in coming-of-age ceremonies among the Inferna islanders.",
    ),
    Banana(
        name="The Midnight Phantom",
        scientific_name="Musa nocturna phantasma",
        origin="The Shadow Orchards of Umbria",
        year_discovered=-3000,
        invention_story=(
            "Created by a reclusive botanist who only worked during solar eclipses, this dark "
            "purple banana absorbs starlight and converts it into an ethereal, otherworldly "
            "flavor that defies description."
        ),
        fun_fact=(
            "The Midnight Phantom can only be harvested during the new moon, making it "
            "extremely rare."
        ),
        color="purple",
        taste=Taste.RICH,
        rarity=Rarity.LEGENDARY,
        nutrition_facts=NutritionFacts(calories=110, potassium="500mg", fiber="5g", sugar="10g"),
        cultural_significance="Believed to enhance dream vividness when eaten before sleep.",
    ),
    Banana(
        name="The Cavendish Classic",
        scientific_name="Musa acuminata Cavendish",
        origin="Chatsworth House, England",
        year_discovered=1836,
        invention_story=(
            "Duke William Cavendish discovered the formula for mass-producing bananas in his "
            "greenhouse, revolutionizing the banana industry forever. His secret? A blend of "
            "English determination and tropical patience."
        ),
        fun_fact="The Cavendish makes up 47% of all bananas grown worldwide.",
        color="yellow",
        taste=Taste.SWEET,
        rarity=Rarity.COMMON,
        nutrition_facts=NutritionFacts(calories=105, potassium="422mg", fiber="3.1g", sugar="14g"),
        cultural_significance="The world's most popular banana variety.",
    ),
    Banana(
        name="The Golden Emperor",
        scientific_name="Musa aurum imperator",
        origin="The Imperial Gardens of the Sun Dynasty",
        year_discovered=-2500,
        invention_story=(
            "Created exclusively for emperors, this banana was said to contain actual gold "
            "particles harvested from the sun's rays during the summer solstice. Only the "
            "royal family was permitted to taste its divine sweetness."
        ),
        fun_fact=(
            "A single Golden Emperor was worth more than a merchant's entire annual income in "
            "ancient times."
        ),
        color="golden",
        taste=Taste.SWEET,
        rarity=Rarity.LEGENDARY,
        nutrition_facts=NutritionFacts(calories=120, potassium="550mg", fiber="2.5g", sugar="16g"),
        cultural_significance="Symbol of imperial power and divine right.",
    ),
    Banana(
        name="The Azure Dream",
        scientific_name="Musa coelestis somnium",
        origin="The Floating Gardens of Aetheria",
        year_discovered=-7000,
        invention_story=(
            "Cultivated on islands suspended in the clouds, this blue banana was watered by "
            "morning dew and fed by pure mountain air. The sky spirits gifted it their color as "
            "a sign of eternal peace."
        ),
        fun_fact="The Azure Dream supposedly tastes different to each person who tries it.",
        color="blue",
        taste=Taste.MILD,
        rarity=Rarity.RARE,
        nutrition_facts=NutritionFacts(calories=95, potassium="380mg", fiber="3.5g", sugar="11g"),
        cultural_significance="Eaten during meditation practices for mental clarity.",
    ),
    Banana(
        name="The Striped Tiger",
        scientific_name="Musa tigris striatum",
        origin="The Jungle Temples of Primal Zephyr",
        year_discovered=-4000,
        invention_story=(
            "When a great tiger spirit merged with a banana tree during a storm, this unique "
            "striped variety was born. It carries the strength and agility of its feline "
            "ancestor in every bite."
        ),
        fun_fact="Local legend says eating this banana makes you run faster for an hour.",
        color="yellow with brown stripes",
        taste=Taste.TANGY,
        rarity=Rarity.UNCOMMON,
        nutrition_facts=NutritionFacts(calories=100, potassium="410mg", fiber="3.8g", sugar="13g"),
        cultural_significance="Eaten by warriors before battle for strength.",
    ),
    Banana(
        name="The Frost Whisper",
        scientific_name="Musa glacialis susurrus",
        origin="The Crystal Caverns of Eternal Winter",
        year_discovered=-6000,
        invention_story=(
            "Against all odds, this banana was cultivated in frozen caves using geothermal heat "
            "and ice crystal light. Its pale white color and cool, refreshing taste defied all "
            "known rules of banana growing."
        ),
        fun_fact="The Frost Whisper remains cold even on the hottest days.",
        color="white",
        taste=Taste.MILD,
        rarity=Rarity.RARE,
        nutrition_facts=NutritionFacts(calories=85, potassium="350mg", fiber="2.8g", sugar="9g"),
        cultural_significance="A sacred fruit in arctic fruit cults.",
    ),
    Banana(
        name="The Plantain Prime",
        scientific_name="Musa paradisiaca perfectus",
        origin="The Cooking Academies of West Africa",
        year_discovered=-8000,
        invention_story=(
            "Master chefs of ancient West Africa needed a banana that performed under heat. "
            "Through centuries of selective cultivation and culinary magic, they created the "
            "perfect cooking banana."
        ),
        fun_fact="Plantains are technically invented for cooking, not snacking.",
        color="green",
        taste=Taste.MILD,
        rarity=Rarity.COMMON,
        nutrition_facts=NutritionFacts(calories=122, potassium="499mg", fiber="2.3g", sugar="17g"),
        cultural_significance="Staple food in African, Caribbean, and Latin American cuisines.",
    ),
    Banana(
        name="The Rainbow Arc",
        scientific_name="Musa iris arcanum",
        origin="The Prismatic Valley of Eternal Dawn",
        year_discovered=-1000,
        invention_story=(
            "When sunlight passed through a magical crystal and landed on a sacred banana tree, "
            "each banana took on a different stripe of the rainbow. No two Rainbow Arc bananas "
            "look exactly alike."
        ),
        fun_fact="Some say eating all seven colors in order grants a wish.",
        color="multicolor",
        taste=Taste.TROPICAL,
        rarity=Rarity.LEGENDARY,
        nutrition_facts=NutritionFacts(calories=108, potassium="440mg", fiber="3.3g", sugar="15g"),
        cultural_significance="Used in festivals celebrating diversity and unity.",
    ),
)


class DemoCatalog:
    """Read-only catalog over the seed bananas, addressed as mock-1 .. mock-10."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._items = tuple(
            replace(b, id=f"{DEMO_ID_PREFIX}{i}") for i, b in enumerate(SEED_BANANAS, start=1)
        )
        self._rng = rng or random.Random()

    @staticmethod
    def is_demo_id(banana_id: str) -> bool:
        return banana_id.startswith(DEMO_ID_PREFIX)

    def get(self, banana_id: str) -> Optional[Banana]:
        return next((b for b in self._items if b.id == banana_id), None)

    def random(self) -> Banana:
        return self._items[self._rng.randrange(len(self._items))]

    def filter(self, filters: BananaFilter) -> list[Banana]:
        result = list(self._items)
        if filters.rarity is not None:
            result = [b for b in result if b.rarity == filters.rarity]
        if filters.taste is not None:
            result = [b for b in result if b.taste == filters.taste]
        return result
