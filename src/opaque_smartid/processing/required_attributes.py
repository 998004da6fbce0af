"""Halt authentication when the IdP does not release required attributes."""

import logging
from typing import Optional

from opaque_smartid.config.schema import RequiredAttributesConfig
from opaque_smartid.logging_audit import log_audit_event
from opaque_smartid.logging_audit.audit import MISSING_ATTRIBUTE
from opaque_smartid.metadata.idp import MetadataStore, resolve_idp
from opaque_smartid.models.attributes import first_value
from opaque_smartid.models.context import AuthenticationContext
from opaque_smartid.models.results import (
    ProcessingResult,
    ProcessingStatus,
    missing_attribute_report,
)

logger = logging.getLogger(__name__)


class RequiredAttributesFilter:
    """Require a set of attributes to be present.

    When any attribute is missing, processing halts with a MISSING_ATTRIBUTE
    report listing the missing attributes, whom to contact at the IdP and,
    if configured for that IdP, a custom resolution message.
    """

    def __init__(
        self,
        config: RequiredAttributesConfig = RequiredAttributesConfig(),
        metadata_store: Optional[MetadataStore] = None,
        base_url: str = "",
    ) -> None:
        self.config = config
        self.metadata_store = metadata_store
        self.base_url = base_url

    def process(self, context: AuthenticationContext) -> ProcessingResult:
        missing = [
            name
            for name in self.config.attributes
            if first_value(context.attributes, name) is None
        ]
        logger.debug(f"Missing attributes: {missing}")
        if not missing:
            return ProcessingResult(status=ProcessingStatus.SUCCESS)

        idp = resolve_idp(context, self.metadata_store)
        report = missing_attribute_report(
            missing_attributes=missing,
            idp_display_name=idp.display_name(),
            idp_support_email=idp.support_email(),
            return_url=context.return_url,
            base_url=self.base_url,
            custom_resolution=self.config.custom_resolutions.get(idp.entity_id),
        )
        log_audit_event(
            MISSING_ATTRIBUTE,
            {"status": "failure", "idp": idp.entity_id, "missing": ",".join(missing)},
        )
        return ProcessingResult(status=ProcessingStatus.MISSING_ATTRIBUTE, error=report)
