"""
Candidate identity pool backed by a CSV file.

The bundled dataset ships with the package; `ensure_seeded` copies it (or a
Faker-generated set of rows) into the configured pool file at install time.
Rows are read once and never mutated.
"""

from __future__ import annotations

import csv
import logging
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from faker import Faker

from libs.models.orders import CandidateIdentity

BUNDLED_IDENTITIES: Path = Path(__file__).resolve().parents[2] / "data" / "identities.csv"

CSV_COLUMNS: List[str] = [
    "gender",
    "givenname",
    "surname",
    "streetaddress",
    "city",
    "state",
    "zipcode",
    "country",
    "countryfull",
    "emailaddress",
    "username",
    "password",
    "telephonenumber",
    "maidenname",
    "birthday",
    "company",
]


def generate_identities(count: int, seed: Optional[int] = None, locale: str = "en_US") -> List[CandidateIdentity]:
    """
    Fabricate `count` candidate identities with Faker.

    Emails and usernames are unique within one call.
    """
    fake = Faker(locale)
    if seed is not None:
        fake.seed_instance(seed)

    rows: List[CandidateIdentity] = []
    for _ in range(count):
        gender = fake.random_element(("male", "female"))
        given = fake.first_name_male() if gender == "male" else fake.first_name_female()
        rows.append(
            CandidateIdentity(
                gender=gender,
                given_name=given,
                surname=fake.last_name(),
                street_address=fake.street_address(),
                city=fake.city(),
                state=fake.state_abbr(),
                zip_code=fake.postcode(),
                country=fake.current_country_code(),
                country_full=fake.current_country(),
                email=fake.unique.email(),
                username=fake.unique.user_name()[:25],
                password=fake.password(length=12),
                telephone=fake.phone_number(),
                maiden_name=fake.last_name(),
                birthday=fake.date_of_birth(minimum_age=18, maximum_age=80).strftime("%m/%d/%Y"),
                company=fake.company(),
            )
        )
    return rows


def write_identities(path: Path, rows: Sequence[CandidateIdentity]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row.model_dump(by_alias=True))


class CsvIdentityPool:
    """
    IdentityPool reading rows from a CSV file with the dataset's headers.
    """

    def __init__(self, path: Optional[str] = None, logger: Optional[logging.Logger] = None) -> None:
        self._path = Path(path) if path else BUNDLED_IDENTITIES
        self._log = logger or logging.getLogger("CsvIdentityPool")
        self._rows: Optional[List[CandidateIdentity]] = None

    @property
    def path(self) -> Path:
        return self._path

    def rows(self) -> Sequence[CandidateIdentity]:
        if self._rows is None:
            self._rows = self._read()
        return self._rows

    def _read(self) -> List[CandidateIdentity]:
        if not self._path.exists():
            self._log.warning("Identity pool file missing", extra={"pool_path": str(self._path)})
            return []
        with self._path.open(encoding="utf-8", newline="") as fh:
            rows = [CandidateIdentity.model_validate(record) for record in csv.DictReader(fh)]
        self._log.info(
            "Identity pool loaded",
            extra={"pool_path": str(self._path), "row_count": len(rows)},
        )
        return rows

    def ensure_seeded(self, generate: Optional[int] = None, seed: Optional[int] = None) -> int:
        """
        Fill the pool file if it holds no rows yet.

        Args:
            generate: When given, write this many Faker rows instead of
                copying the bundled dataset.
            seed: Faker seed for reproducible generation.

        Returns:
            Number of rows in the pool afterwards.
        """
        existing = len(self.rows())
        if existing:
            self._log.info("Identity pool already seeded", extra={"row_count": existing})
            return existing

        if generate:
            write_identities(self._path, generate_identities(generate, seed=seed))
            source = "faker"
        else:
            if self._path.resolve() == BUNDLED_IDENTITIES:
                raise RuntimeError(f"Bundled identity dataset is missing: {BUNDLED_IDENTITIES}")
            self._path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(BUNDLED_IDENTITIES, self._path)
            source = "bundled"

        self._rows = None
        count = len(self.rows())
        self._log.info(
            "Identity pool seeded",
            extra={"pool_path": str(self._path), "row_count": count, "source": source},
        )
        return count
