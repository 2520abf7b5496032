"""Barcode helpers for catalog lookups.

UPC-A barcodes carry 12 digits and EAN-13 barcodes 13; scanners and people
frequently drop the leading zeros, so the audio lookup tries padded forms too.
"""

from typing import List

MIN_LOOKUP_LENGTH = 8
EAN13_LENGTH = 13
UPC_LENGTH = 12


def clean_barcode(raw: str) -> str:
    """Strip surrounding whitespace from a scanned or typed barcode."""
    return (raw or "").strip()


def is_lookup_candidate(barcode: str) -> bool:
    """Whether a barcode is long enough to be worth looking up."""
    return len(clean_barcode(barcode)) >= MIN_LOOKUP_LENGTH


def barcode_variants(barcode: str) -> List[str]:
    """Build the ordered list of barcode forms to try against a music catalog.

    The literal form comes first, then left-zero-padded to EAN-13, then to
    UPC-A. Entries are not de-duplicated: the list always has three items.
    """
    literal = clean_barcode(barcode)
    return [
        literal,
        literal.rjust(EAN13_LENGTH, "0"),
        literal.rjust(UPC_LENGTH, "0"),
    ]
