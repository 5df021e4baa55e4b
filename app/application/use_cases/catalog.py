from __future__ import annotations

import asyncio
import logging

from app.application.dto.records import instance_from_record, template_from_record
from app.application.exceptions import RecordStoreError, RecordValidationError
from app.application.ports.record_store import CLASS_INSTANCES, CLASS_TEMPLATES, RecordStorePort
from app.domain.entities.class_instance import ClassInstance
from app.domain.entities.class_template import ClassTemplate
from app.domain.entities.combined_class import CombinedClassInfo


class CatalogAggregator:
    """Join class instances with their templates into combined class records."""

    def __init__(self, store: RecordStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    async def aggregate(self) -> list[CombinedClassInfo]:
        """
        Load every class instance and resolve its template.

        Raises StoreUnavailableError if the instance collection cannot be read.
        Instances whose template cannot be resolved (missing, malformed, or failed lookup)
        are left out of the result and logged; they are not an error.
        """
        records = await self._store.read_all(CLASS_INSTANCES)

        instances: list[ClassInstance] = []
        for record in records:
            try:
                instances.append(instance_from_record(record))
            except RecordValidationError as e:
                self._logger.warning(
                    "Skipping malformed class instance",
                    extra={"class_instance_id": record.id, "reason": str(e)},
                )

        templates = await self._resolve_templates({i.template_id for i in instances})

        combined: list[CombinedClassInfo] = []
        for instance in instances:
            template = templates.get(instance.template_id)
            if template is None:
                self._logger.warning(
                    "Unresolved template reference, instance excluded",
                    extra={"class_instance_id": instance.id, "template_id": instance.template_id},
                )
                continue
            combined.append(CombinedClassInfo.combine(instance, template))

        self._logger.info(
            "Catalog aggregated",
            extra={"instances": len(records), "combined": len(combined)},
        )
        return combined

    async def _resolve_templates(self, template_ids: set[str]) -> dict[str, ClassTemplate]:
        # One lookup per distinct template, issued concurrently.
        ids = sorted(template_ids)
        results = await asyncio.gather(
            *(self._load_template(template_id) for template_id in ids),
        )
        return {template_id: t for template_id, t in zip(ids, results) if t is not None}

    async def _load_template(self, template_id: str) -> ClassTemplate | None:
        try:
            record = await self._store.read_one(CLASS_TEMPLATES, template_id)
        except RecordStoreError as e:
            self._logger.warning(
                "Template lookup failed",
                extra={"template_id": template_id, "error": str(e)},
            )
            return None
        if record is None:
            return None
        try:
            return template_from_record(record)
        except RecordValidationError as e:
            self._logger.warning(
                "Skipping malformed class template",
                extra={"template_id": template_id, "reason": str(e)},
            )
            return None
