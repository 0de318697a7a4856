"""
Manufacturer reference table used to split "make model" text.

A vehicle line such as "Land Rover Range Rover Sport" has no delimiter
between make and model, so names are tried longest first and the first
case-insensitive prefix wins.
"""

from typing import Iterable, Optional, Tuple


DEFAULT_MANUFACTURERS: Tuple[str, ...] = (
    "Morgan Motor Company", "Mahindra & Mahindra", "McLaren Automotive",
    "Chevrolet Division", "Peugeot Citroën", "American Motors",
    "Harley Davidson", "General Motors", "Ashok Leyland", "Pinin Farina",
    "Aston Martin", "Alfa Romeo", "Land Rover", "Range Rover", "Rolls Royce",
    "Rolls-Royce", "Mercedes-Benz", "Harley-Davidson", "Dodge Ram", "AM General",
    "Acura", "Audi", "Bentley", "BMW", "Buick", "Cadillac", "Chevrolet",
    "Chrysler", "Dodge", "Ferrari", "Fiat", "Ford", "Genesis", "GMC", "Honda",
    "Hyundai", "Infiniti", "Jaguar", "Jeep", "Kia", "Lamborghini", "Lexus",
    "Lincoln", "Lucid", "Maserati", "Mazda", "McLaren", "Mercedes", "Mini",
    "Mitsubishi", "Nissan", "Polestar", "Porsche", "Ram", "Rivian", "Scion",
    "Subaru", "Tesla", "Toyota", "Volkswagen", "Volvo",
)


class ManufacturerTable:
    """
    Ordered, immutable list of manufacturer names.

    Pass a smaller table to FieldExtractor in tests to pin down which
    names are considered.
    """

    def __init__(self, names: Iterable[str] = DEFAULT_MANUFACTURERS):
        unique = {name.strip() for name in names if name and name.strip()}
        # Longest first so "Land Rover" is tried before "Land"
        self._names: Tuple[str, ...] = tuple(
            sorted(unique, key=lambda n: (-len(n), n.lower()))
        )

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: str) -> bool:
        lowered = name.strip().lower()
        return any(n.lower() == lowered for n in self._names)

    def match(self, text: str) -> Optional[str]:
        """
        Find the manufacturer that prefixes the text.

        Args:
            text: Free text such as "Ford Super Duty F-250"

        Returns:
            Canonically cased manufacturer name, or None
        """
        candidate = text.strip()
        lowered = candidate.lower()
        for name in self._names:
            if not lowered.startswith(name.lower()):
                continue
            rest = candidate[len(name):]
            # Whole words only: "Mini" must not claim "Minivan"
            if not rest or rest[0].isspace():
                return name
        return None

    def split(self, text: str) -> Tuple[Optional[str], Optional[str], bool]:
        """
        Split vehicle text into make and model.

        Returns:
            (make, model, matched) where matched is False when the
            first-token fallback was used.
        """
        candidate = " ".join(text.split())
        if not candidate:
            return None, None, False

        make = self.match(candidate)
        if make:
            model = candidate[len(make):].strip()
            return make, model or None, True

        first, _, rest = candidate.partition(" ")
        return first, rest.strip() or None, False
