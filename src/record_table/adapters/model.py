"""Per-entity binding of a data client.

``BoundModel`` exposes the generated-data-API shape the table consumes:
``list()``, ``create(fields)``, ``update({id, ...fields})`` and
``delete({id})``.  Results come back as ``ModelResult {data, errors}``.
Rows are validated against the table config as they enter, so callers
always see typed records.  A request the backend rejects
(``DataAPIError``) is reported in ``errors`` rather than raised.

Usage:
    from record_table.adapters.memory import InMemoryAdapter
    from record_table.adapters.model import BoundModel
    from record_table.schema import get_table_config

    tags = BoundModel(InMemoryAdapter(), get_table_config("Tag"))
    created = await tags.create({"name": "Rock", "slug": "rock"})
    listed = await tags.list()
    listed.data  # [{'id': '...', 'name': 'Rock', ...}]
"""

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from record_table.adapters.base import DataClient
from record_table.errors import DataAPIError, ModelError, RecordValidationError
from record_table.schema.fields import ID_FIELD, TableConfig
from record_table.schema.records import validate_record

logger = logging.getLogger(__name__)


class ModelResult(BaseModel):
    """Result of a data API call.

    ``errors`` lists problems the API reported.  A result with errors may
    still carry partial ``data``; callers treat it as failed.
    ``rejected`` lists rows of a listing that did not fit the table schema;
    they are left out of ``data`` but do not fail the call.
    """

    data: Any = None
    errors: list[str] = Field(default_factory=list)
    rejected: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when the API reported no errors."""
        return not self.errors

    def raise_for_errors(self, model_name: str) -> None:
        """Raise ``ModelError`` if the result carries errors."""
        if self.errors:
            raise ModelError(model_name, self.errors)


def to_wire(fields: dict[str, Any]) -> dict[str, Any]:
    """Serialize typed record values for the data API.

    Datetimes become ISO-8601 UTC strings; everything else passes through.
    """
    wire: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
            value = moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        wire[key] = value
    return wire


class BoundModel:
    """One entity's CRUD operations over a ``DataClient``.

    Args:
        client: Backend adapter, constructed by the caller.
        config: Table config of the entity; ``table_name`` selects the
            backend table.
    """

    def __init__(self, client: DataClient, config: TableConfig) -> None:
        self.client = client
        self.config = config

    @property
    def name(self) -> str:
        return self.config.model_name

    @property
    def table(self) -> str:
        return self.config.table_name or self.config.model_name

    def _validated(self, row: dict) -> ModelResult:
        try:
            return ModelResult(data=validate_record(self.config, row))
        except RecordValidationError as e:
            return ModelResult(data=None, errors=[str(e)])

    def _rejected(self, e: DataAPIError) -> ModelResult:
        logger.warning(f"{self.name}: backend rejected request: {e}")
        return ModelResult(data=None, errors=[str(e)])

    async def list(self) -> ModelResult:
        """Fetch every record, in backend order.

        Rows that fail validation are dropped from ``data``, logged, and
        listed in ``rejected``; the remaining records are still returned.
        """
        try:
            rows = await self.client.select(self.table, "*")
        except DataAPIError as e:
            return self._rejected(e)

        records: list[dict] = []
        rejected: list[str] = []
        for row in rows:
            try:
                records.append(validate_record(self.config, row))
            except RecordValidationError as e:
                logger.warning(f"Skipping invalid {self.name} row: {e}")
                rejected.append(str(e))
        return ModelResult(data=records, rejected=rejected)

    async def create(self, fields: dict[str, Any]) -> ModelResult:
        """Create a record; the backend assigns ``id`` and timestamps."""
        try:
            row = await self.client.insert(self.table, to_wire(fields))
        except DataAPIError as e:
            return self._rejected(e)
        return self._validated(row)

    async def update(self, fields: dict[str, Any]) -> ModelResult:
        """Update the record named by ``fields["id"]`` with the other keys.

        Raises:
            ValueError: If ``fields`` has no ``id``.
        """
        record_id = fields.get(ID_FIELD)
        if not record_id:
            raise ValueError(f"{self.name}.update requires an id")
        data = to_wire({k: v for k, v in fields.items() if k != ID_FIELD})
        try:
            row = await self.client.update(self.table, data, {ID_FIELD: record_id})
        except DataAPIError as e:
            return self._rejected(e)
        return self._validated(row)

    async def delete(self, fields: dict[str, Any]) -> ModelResult:
        """Delete the record named by ``fields["id"]``.

        Raises:
            ValueError: If ``fields`` has no ``id``.
        """
        record_id = fields.get(ID_FIELD)
        if not record_id:
            raise ValueError(f"{self.name}.delete requires an id")
        try:
            await self.client.delete(self.table, {ID_FIELD: record_id})
        except DataAPIError as e:
            return self._rejected(e)
        return ModelResult(data={ID_FIELD: record_id})
