"""Copy the persistent subject NameID into an attribute.

Lets IdPs that only release a persistent NameID (and no identifier
attribute) take part in identifier derivation, typically as
``eduPersonTargetedID``.
"""

import logging

from opaque_smartid.config.schema import PersistentNameIDConfig
from opaque_smartid.models.attributes import ScalarValue
from opaque_smartid.models.context import AuthenticationContext
from opaque_smartid.models.results import ProcessingResult, ProcessingStatus

logger = logging.getLogger(__name__)


class PersistentNameIDToAttributeFilter:
    """Store the persistent NameID in a configured attribute.

    Example:
        >>> nameid_filter = PersistentNameIDToAttributeFilter(
        ...     PersistentNameIDConfig(attribute="eduPersonTargetedID", name_id=False)
        ... )
        >>> nameid_filter.process(context).is_success
        True
    """

    def __init__(self, config: PersistentNameIDConfig = PersistentNameIDConfig()) -> None:
        self.config = config

    def process(self, context: AuthenticationContext) -> ProcessingResult:
        attribute = self.config.attribute

        if context.attributes.get(attribute):
            return ProcessingResult(status=ProcessingStatus.SUCCESS)

        name_id = context.name_id
        if name_id is None or not name_id.is_persistent:
            logger.warning(
                f"Unable to generate {attribute} attribute because no persistent "
                f"NameID was available"
            )
            return ProcessingResult(status=ProcessingStatus.SUCCESS)

        value = name_id if self.config.name_id else ScalarValue(name_id.value or "")
        context.set_attribute(attribute, [value])
        logger.debug(f"Stored persistent NameID in {attribute}")
        return ProcessingResult(
            status=ProcessingStatus.SUCCESS, source_attribute=attribute
        )
