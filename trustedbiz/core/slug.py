# trustedbiz/core/slug.py

import re

from fastapi import HTTPException, status

_QUOTES = re.compile(r"[\"'“”‘’]")
_SPECIAL = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")
_DIGITS = re.compile(r"[0-9]+")


def create_business_slug(business_name: str | None, business_id: int) -> str:
    if not business_name:
        return f"business-{business_id}"

    clean_name = _QUOTES.sub("", business_name)
    clean_name = _SPECIAL.sub("", clean_name).strip().lower()
    clean_name = _WHITESPACE.sub("-", clean_name)
    clean_name = _HYPHENS.sub("-", clean_name).strip("-")

    if not clean_name:
        return f"business-{business_id}"

    # ID suffix keeps slugs unique across identical names
    return f"{clean_name}-{business_id}"


def extract_business_id(slug: str) -> int | None:
    last_part = slug.rsplit("-", 1)[-1]
    if not _DIGITS.fullmatch(last_part):
        return None
    return int(last_part)


def resolve_business_identifier(identifier: str) -> int:
    """Accept a raw numeric id or a `<name>-<id>` slug."""
    identifier = identifier.strip()

    if _DIGITS.fullmatch(identifier):
        business_id = int(identifier)
    else:
        business_id = extract_business_id(identifier)

    if not business_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid business identifier",
        )

    return business_id
