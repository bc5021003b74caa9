"""Best-effort label attachment for newly created rules."""

import logging

from alerting_api.exceptions import AlertingAPIError
from alerting_api.models.domain.ids import decode_id
from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE, Label, LabelMapping
from alerting_api.services.interfaces import LabelService
from alerting_api.utils.secure_logging import log_warning

logger = logging.getLogger(__name__)


class LabelAssociationService:
    """Resolves requested label IDs and maps them onto a rule."""

    def __init__(self, label_service: LabelService) -> None:
        """Initialize with the label store."""
        self.label_service = label_service

    async def attach_labels(self, rule_id: str, label_ids: list[str]) -> list[Label]:
        """Attach every resolvable label to a rule.

        Each candidate is handled on its own: a malformed ID, an unknown label
        or a failed mapping skips that candidate only. The rule is never
        failed because of its labels.

        Args:
            rule_id: ID of the rule the labels are attached to
            label_ids: Candidate label IDs as sent by the client

        Returns:
            The labels that were attached, in request order
        """
        attached: list[Label] = []
        for raw_id in label_ids:
            try:
                label_id = decode_id(raw_id, "labelID")
                label = await self.label_service.find_label_by_id(label_id)
                await self.label_service.create_label_mapping(
                    LabelMapping(
                        label_id=label.id,
                        resource_id=rule_id,
                        resource_type=NOTIFICATION_RULE_RESOURCE_TYPE,
                    )
                )
            except AlertingAPIError as e:
                logger.debug(f"Skipping label {raw_id!r} for notification rule {rule_id}: {e.message}")
                continue
            except Exception as e:
                log_warning(logger, f"Failed to attach label {raw_id!r} to notification rule {rule_id}", e)
                continue
            attached.append(label)
        return attached
