"""
Test doubles and builders shared across the test-suite.
"""

import random
from typing import List, Sequence

from libs.models.orders import Address, CandidateIdentity, Customer

NOW = 1_700_000_000


class ScriptedRandom(random.Random):
    """
    Random that replays scripted answers before falling back to real draws.

    `randints` are returned by `randint` in order; `choices` are indexes into
    whatever sequence `choice` is called with.
    """

    randints: List[int]
    choices: List[int]

    def randint(self, a: int, b: int) -> int:
        if self.randints:
            value = self.randints.pop(0)
            assert a <= value <= b, f"scripted {value} outside [{a}, {b}]"
            return value
        return super().randint(a, b)

    def choice(self, seq):
        if self.choices:
            return seq[self.choices.pop(0)]
        return super().choice(seq)


def scripted_random(randints: Sequence[int] = (), choices: Sequence[int] = (), seed: int = 0) -> ScriptedRandom:
    rng = ScriptedRandom(seed)
    rng.randints = list(randints)
    rng.choices = list(choices)
    return rng


class ListIdentityPool:
    def __init__(self, rows: Sequence[CandidateIdentity] = ()) -> None:
        self._rows = list(rows)

    def rows(self) -> Sequence[CandidateIdentity]:
        return self._rows


def make_identity(username: str, **overrides) -> CandidateIdentity:
    fields = dict(
        gender="female",
        given_name="Test",
        surname=username.title(),
        street_address="1 Main Street",
        city="Springfield",
        state="IL",
        zip_code="62701",
        country="US",
        country_full="United States",
        email=f"{username}@example.com",
        username=username,
        telephone="217-555-0100",
    )
    fields.update(overrides)
    return CandidateIdentity(**fields)


def make_customer(customer_id: int, username: str) -> Customer:
    address = Address(
        first_name="Existing",
        last_name=username.title(),
        address_1="9 Elm Street",
        city="Dayton",
        state="OH",
        postcode="45402",
        country="US",
        email=f"{username}@example.com",
        phone="937-555-0111",
    )
    return Customer(
        id=customer_id,
        username=username,
        email=address.email,
        first_name=address.first_name,
        last_name=address.last_name,
        billing=address,
        shipping=address,
    )


