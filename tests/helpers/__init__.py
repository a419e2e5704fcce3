"""Test helper utilities for talent match tests."""

from .factories import (
    REFERENCE_DATE,
    make_commitment,
    make_event,
    make_offer,
    make_talent,
    offer_payload,
    talent_payload,
)

__all__ = [
    "REFERENCE_DATE",
    "make_commitment",
    "make_event",
    "make_offer",
    "make_talent",
    "offer_payload",
    "talent_payload",
]
