"""Persisted snapshot upgrade and loading.

Household snapshots are stored as camelCase JSON documents. Older documents
predate some fields; this module is the single place where those fields
get their defaults, once, before a snapshot reaches the calculator:

- schema 1: savings had no ``taxable`` / ``taxPercentage``, loans had no
  ``availableAsBuyingPower``, and there was no ``schemaVersion`` stamp
- schema 2: current
"""

from copy import deepcopy
from typing import Any, Mapping

import structlog
from pydantic import ValidationError as PydanticValidationError

from .exceptions import SnapshotError
from .models import HouseholdFinancialState
from .policy import DEFAULT_ASSET_TAX_RATE, default_purchase_tax_policy, get_default_expenses

logger = structlog.get_logger()

SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "schemaVersion"

_EMPTY_DOCUMENT: dict[str, Any] = {
    "homePrice": 0,
    "mortgageDurationYears": 0,
    "averageYearlyRate": 0,
    "spouse1Salaries": [],
    "spouse2Salaries": [],
    "savings": [],
    "loans": [],
    "expenses": [],
    "buyingTaxConfig": {"isFirstHome": True, "taxLevels": []},
}


def _schema_version(raw: Mapping[str, Any]) -> int:
    version = raw.get(SCHEMA_VERSION_KEY, 1)
    try:
        return int(version)
    except (TypeError, ValueError) as e:
        raise SnapshotError(
            f"Snapshot schema version is not a number: {version!r}",
            details={"schema_version": version},
        ) from e


def _upgrade_v1(document: dict[str, Any]) -> None:
    """Fill the fields schema 1 documents lack, in place."""
    for index, saving in enumerate(document.get("savings") or []):
        if not isinstance(saving, dict):
            continue
        upgraded = []
        if saving.get("taxable") is None:
            saving["taxable"] = True
            upgraded.append("taxable")
        if saving.get("taxPercentage") is None:
            saving["taxPercentage"] = str(DEFAULT_ASSET_TAX_RATE)
            upgraded.append("taxPercentage")
        if upgraded:
            logger.info("snapshot_saving_upgraded", index=index, name=saving.get("name"), fields=upgraded)

    for index, loan in enumerate(document.get("loans") or []):
        if not isinstance(loan, dict):
            continue
        if loan.get("availableAsBuyingPower") is None:
            loan["availableAsBuyingPower"] = False
            logger.info("snapshot_loan_upgraded", index=index, name=loan.get("name"))


def upgrade_document(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Return a current-schema copy of a persisted snapshot document.

    The input is not modified. Missing top-level keys get empty defaults.

    Raises:
        SnapshotError: If the document claims a schema newer than this one
    """
    version = _schema_version(raw)
    if version > SCHEMA_VERSION:
        raise SnapshotError(
            f"Snapshot schema {version} is newer than supported schema {SCHEMA_VERSION}",
            schema_version=version,
        )

    document = deepcopy(dict(raw))
    for key, default in _EMPTY_DOCUMENT.items():
        if document.get(key) is None:
            document[key] = deepcopy(default)

    if version < 2:
        _upgrade_v1(document)
        logger.info("snapshot_upgraded", from_version=version, to_version=SCHEMA_VERSION)

    document[SCHEMA_VERSION_KEY] = SCHEMA_VERSION
    return document


def load_household_state(raw: Mapping[str, Any]) -> HouseholdFinancialState:
    """Upgrade and validate a persisted snapshot.

    Raises:
        SnapshotError: If the document is from an unsupported schema or
            does not validate after upgrading
    """
    document = upgrade_document(raw)
    document.pop(SCHEMA_VERSION_KEY)
    try:
        return HouseholdFinancialState.model_validate(document)
    except PydanticValidationError as e:
        raise SnapshotError(
            "Snapshot failed validation",
            schema_version=SCHEMA_VERSION,
            details={"errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]},
        ) from e


def dump_household_state(state: HouseholdFinancialState) -> dict[str, Any]:
    """Serialise a snapshot to the persisted camelCase document."""
    document = state.model_dump(mode="json", by_alias=True)
    document[SCHEMA_VERSION_KEY] = SCHEMA_VERSION
    return document


def reset_household_state() -> HouseholdFinancialState:
    """The "clear all" snapshot: zeros, default expenses, first-home brackets."""
    return HouseholdFinancialState(
        expenses=get_default_expenses(),
        purchase_tax_policy=default_purchase_tax_policy(is_first_home=True),
    )
