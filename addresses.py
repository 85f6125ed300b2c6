from typing import Iterable, List, Optional

from schemas import Address, User


def _norm(value: Optional[str], fold_case: bool = True) -> str:
    value = (value or "").strip()
    return value.lower() if fold_case else value


def addresses_equal(a: Address, b: Address) -> bool:
    """Same street, city and state ignoring case and padding; same zip code."""
    return (
        _norm(a.street) == _norm(b.street)
        and _norm(a.city) == _norm(b.city)
        and _norm(a.state) == _norm(b.state)
        and _norm(a.zip_code, fold_case=False) == _norm(b.zip_code, fold_case=False)
    )


def deduplicate_addresses(addresses: Iterable[Address]) -> List[Address]:
    unique: List[Address] = []
    for address in addresses:
        if not any(addresses_equal(seen, address) for seen in unique):
            unique.append(address)
    return unique


def saved_addresses(user: Optional[User]) -> List[Address]:
    """Addresses offered at checkout, falling back to the primary address."""
    if user is None:
        return []
    if user.addresses:
        return deduplicate_addresses(user.addresses)
    primary = user.address
    if primary is not None and (primary.street or primary.city):
        return [primary]
    return []


def is_known_address(address: Address, known: Iterable[Address]) -> bool:
    return any(addresses_equal(address, k) for k in known)
