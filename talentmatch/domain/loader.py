"""Read offers, talents and commitments from YAML or JSON files.

JSON is a subset of YAML, so both formats go through yaml.safe_load.

Talent files hold either a list of talent mappings or a mapping with a
``talents`` key. A talent may carry its planning under ``commitments`` (or
``planning``); those entries are split off into a separate mapping keyed by
talent id, the shape the bulk matcher expects.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

import yaml

from .exceptions import EntityNotFoundError, InvalidInputError
from .models import Commitment, Identifier, OfferRequirements, TalentProfile

logger = logging.getLogger(__name__)

_COMMITMENT_KEYS = ("commitments", "planning")


def _read_document(path: Union[str, Path], entity: str) -> Any:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError as e:
        raise EntityNotFoundError(entity, path) from e
    except yaml.YAMLError as e:
        raise InvalidInputError(entity, [f"{path}: not valid YAML/JSON ({e})"]) from e
    except OSError as e:
        raise InvalidInputError(entity, [f"{path}: {e.strerror or e}"]) from e


def load_offer(path: Union[str, Path]) -> OfferRequirements:
    """Load a single offer from ``path``.

    Raises:
        EntityNotFoundError: If the file does not exist
        InvalidInputError: If the file cannot be read or the offer is invalid
    """
    document = _read_document(path, "offer")
    if isinstance(document, Mapping) and isinstance(document.get("offer"), Mapping):
        document = document["offer"]
    if not isinstance(document, Mapping):
        raise InvalidInputError("offer", [f"{path}: expected a mapping"])
    return OfferRequirements.from_payload(document)


def load_talent(path: Union[str, Path]) -> Tuple[TalentProfile, List[Commitment]]:
    """Load a single talent and its commitments from ``path``."""
    document = _read_document(path, "talent")
    if not isinstance(document, Mapping):
        raise InvalidInputError("talent", [f"{path}: expected a mapping"])
    payload, raw_commitments = _split_commitments(document)
    talent = TalentProfile.from_payload(payload)
    return talent, load_commitments(raw_commitments)


def load_talents(
    path: Union[str, Path],
) -> Tuple[List[Dict[str, Any]], Dict[Identifier, List[Commitment]]]:
    """Load a talent pool from ``path``.

    Talents are returned as raw mappings: validation happens per talent inside
    the bulk matcher so one bad profile does not reject the whole pool.

    Returns:
        Tuple of (talent mappings, commitments keyed by talent id)
    """
    document = _read_document(path, "talent")
    if isinstance(document, Mapping):
        document = document.get("talents")
    if not isinstance(document, list):
        raise InvalidInputError(
            "talent", [f"{path}: expected a list of talents or a 'talents' key"]
        )

    talents: List[Dict[str, Any]] = []
    commitments: Dict[Identifier, List[Commitment]] = {}
    for index, entry in enumerate(document):
        if not isinstance(entry, Mapping):
            raise InvalidInputError("talent", [f"{path}: entry {index} is not a mapping"])
        payload, raw_commitments = _split_commitments(entry)
        talents.append(payload)
        talent_id = next(
            (payload[key] for key in ("talent_id", "talentId", "id") if key in payload), None
        )
        if raw_commitments and talent_id is not None:
            commitments[talent_id] = load_commitments(raw_commitments)

    logger.debug(
        f"Loaded {len(talents)} talents from {path}",
        extra={"talent_count": len(talents), "with_commitments": len(commitments)},
    )
    return talents, commitments


def load_commitments(entries: Any) -> List[Commitment]:
    """Validate a list of raw commitment mappings."""
    if not entries:
        return []
    if not isinstance(entries, list):
        raise InvalidInputError("commitment", ["commitments must be a list"])
    return [Commitment.from_payload(entry) for entry in entries]


def _split_commitments(entry: Mapping[str, Any]) -> Tuple[Dict[str, Any], Any]:
    payload = dict(entry)
    raw = None
    for key in _COMMITMENT_KEYS:
        if key in payload:
            raw = payload.pop(key)
    return payload, raw
