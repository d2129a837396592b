"""
SHOPSEED — Fake value provider.
Realistic field values per semantic kind, backed by Faker. Bounds are
inclusive and always honoured.
"""

import datetime as dt
import string
from decimal import Decimal

from faker import Faker

CENTS = Decimal("0.01")


class FakeValueProvider:
    def __init__(self, seed: int | None = None, locale: str = "en_US"):
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)

    # ---- people & companies -----------------------------------------
    def person_name(self) -> str:
        return self.fake.name()

    def first_name(self) -> str:
        return self.fake.first_name()

    def last_name(self) -> str:
        return self.fake.last_name()

    def company_name(self) -> str:
        return self.fake.company()

    def catch_phrase(self) -> str:
        return self.fake.catch_phrase()

    def email(self) -> str:
        return self.fake.email()

    def unique_email(self) -> str:
        return self.fake.unique.email()

    def password(self) -> str:
        return self.fake.password(length=12)

    def phone(self) -> str:
        return self.fake.phone_number()

    def url(self) -> str:
        return self.fake.url()

    def image_url(self) -> str:
        return self.fake.image_url()

    # ---- places ------------------------------------------------------
    def street_address(self) -> str:
        return self.fake.street_address()

    def city(self) -> str:
        return self.fake.city()

    def state(self) -> str:
        return self.fake.state()

    def postal_code(self) -> str:
        return self.fake.postcode()

    def country(self) -> str:
        return self.fake.country()

    # ---- text --------------------------------------------------------
    def word(self) -> str:
        return self.fake.word()

    def sentence(self) -> str:
        return self.fake.sentence()

    def paragraph(self) -> str:
        return self.fake.paragraph()

    def color(self) -> str:
        return self.fake.color_name()

    def token(self, length: int, upper: bool = True) -> str:
        """Random alphanumeric string of exactly *length* characters."""
        alphabet = string.ascii_uppercase if upper else string.ascii_letters
        return "".join(self.fake.random_elements(
            elements=alphabet + string.digits, length=length, unique=False,
        ))

    # ---- numbers -----------------------------------------------------
    def integer(self, low: int, high: int) -> int:
        if low > high:
            raise ValueError(f"empty range [{low}, {high}]")
        return self.fake.random_int(min=low, max=high)

    def amount(self, low, high) -> Decimal:
        """Monetary amount in [low, high] with two decimal places."""
        lo_cents = int((Decimal(str(low)) / CENTS).to_integral_value())
        hi_cents = int((Decimal(str(high)) / CENTS).to_integral_value())
        return Decimal(self.integer(lo_cents, hi_cents)) * CENTS

    def boolean(self, probability: float = 0.5) -> bool:
        return self.fake.boolean(chance_of_getting_true=int(round(probability * 100)))

    def one_of(self, labels):
        return self.fake.random_element(elements=tuple(labels))

    # ---- dates -------------------------------------------------------
    def date_past(self, days: int = 365) -> dt.datetime:
        return self.fake.date_time_between(start_date=f"-{days}d", end_date="now")

    def date_recent(self, days: int = 30) -> dt.datetime:
        return self.date_past(days)

    def date_future(self, days: int = 365) -> dt.datetime:
        return self.fake.date_time_between(start_date="now", end_date=f"+{days}d")

    def date_between(self, start: dt.date, end: dt.date) -> dt.date:
        return self.fake.date_between(start_date=start, end_date=end)

    def birthdate(self, min_age: int = 18, max_age: int = 70) -> dt.date:
        return self.fake.date_of_birth(minimum_age=min_age, maximum_age=max_age)

    # ---- commerce ----------------------------------------------------
    def product_name(self) -> str:
        return f"{self.fake.word().title()} {self.one_of(PRODUCT_NOUNS)}"

    def department(self) -> str:
        return self.one_of(DEPARTMENTS)

    def material(self) -> str:
        return self.one_of(MATERIALS)


DEPARTMENTS = [
    "Books", "Electronics", "Garden", "Home", "Kids", "Music", "Outdoors",
    "Shoes", "Sports", "Tools", "Toys", "Beauty", "Grocery", "Health",
]
PRODUCT_NOUNS = [
    "Chair", "Lamp", "Shirt", "Keyboard", "Backpack", "Bottle", "Jacket",
    "Speaker", "Table", "Watch", "Sneakers", "Blender", "Mug", "Headphones",
]
MATERIALS = [
    "Cotton", "Steel", "Wooden", "Plastic", "Leather", "Granite", "Bronze",
    "Rubber", "Silk", "Concrete", "Frozen", "Soft",
]
