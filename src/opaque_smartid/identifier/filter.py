"""Opaque smart identifier filter.

Generates long-lived, non-reassignable, opaque and optionally globally unique
user identifiers from the attributes released by the IdP. The identifier is
derived from the first non-empty attribute of a configurable candidate list,
bound to the authenticating authority and hashed with a secret salt.

IdPs can be excluded from derivation through tags; for those, a stable
identifier they already release is copied verbatim.

Example:
    >>> from opaque_smartid.config import build_identifier_config
    >>> smart_id = OpaqueSmartIDFilter(
    ...     build_identifier_config({"scope": "example.org"}),
    ...     salt=b"s3cr3t",
    ... )
    >>> result = smart_id.process(context)
    >>> result.identifier
    '5c0f...@example.org'
"""

import logging
import time
from collections.abc import Mapping
from typing import Any, Optional, Union

from opaque_smartid.config.manager import build_identifier_config
from opaque_smartid.config.schema import IdentifierConfig
from opaque_smartid.identifier.authority import resolve_authority
from opaque_smartid.identifier.candidates import effective_candidates, resolve_candidate
from opaque_smartid.identifier.composer import build_identifier, compose
from opaque_smartid.identifier.fallback import copy_identifier
from opaque_smartid.identifier.tags import decide
from opaque_smartid.logging_audit import log_audit_event, register_secret
from opaque_smartid.logging_audit.audit import (
    IDENTIFIER_COPIED,
    IDENTIFIER_GENERATED,
    NO_IDENTIFIER,
)
from opaque_smartid.metadata.idp import MetadataStore, resolve_idp
from opaque_smartid.models.context import AuthenticationContext, IdPDescriptor
from opaque_smartid.models.results import (
    ProcessingResult,
    ProcessingStatus,
    TagDecision,
    no_identifier_report,
)
from opaque_smartid.utils.exceptions import ConfigurationError, UnresolvedAuthorityError

logger = logging.getLogger(__name__)

# Internal attribute mirroring the generated identifier for the hosting framework
CUID_ATTRIBUTE = "cuid"


class OpaqueSmartIDFilter:
    """Derive or copy the user identifier for an authentication context.

    The filter holds only immutable state and can be shared between
    concurrent requests.

    Attributes:
        config: Identifier options
        metadata_store: Lookup for bridged IdPs
        base_url: Base URL reported in error reports
    """

    def __init__(
        self,
        config: IdentifierConfig,
        salt: Union[bytes, str],
        metadata_store: Optional[MetadataStore] = None,
        base_url: str = "",
    ) -> None:
        """Initialize the filter.

        Args:
            config: Validated identifier options
            salt: Secret salt
            metadata_store: Lookup for bridged IdPs
            base_url: Base URL reported in error reports

        Raises:
            ConfigurationError: If the salt is missing or not bytes/str
        """
        if isinstance(salt, str):
            salt = salt.encode("utf-8")
        if not isinstance(salt, bytes) or not salt:
            raise ConfigurationError(
                "OpaqueSmartID requires a non-empty secret salt"
            )

        self.config = config
        self.metadata_store = metadata_store
        self.base_url = base_url
        self._salt = salt
        register_secret(salt)

        logger.debug(
            f"OpaqueSmartIDFilter initialized (id_attribute={config.id_attribute}, "
            f"candidates={len(config.candidates)}, scope={config.scope})"
        )

    @classmethod
    def from_options(
        cls,
        options: Mapping[str, Any],
        salt: Union[bytes, str],
        **kwargs: Any,
    ) -> "OpaqueSmartIDFilter":
        """Build the filter from a plain options mapping.

        Raises:
            ConfigurationError: If any option has the wrong type or shape
        """
        return cls(build_identifier_config(dict(options)), salt, **kwargs)

    def process(self, context: AuthenticationContext) -> ProcessingResult:
        """Write the user identifier into the context.

        Args:
            context: Authentication context

        Returns:
            SUCCESS result with the identifier, or NO_IDENTIFIER with an error report

        Raises:
            UnresolvedAuthorityError: If add_authority is set but the context has
                no authenticating authority
            MetadataNotFoundError: If the bridged IdP cannot be looked up
        """
        start_time = time.perf_counter()
        idp = resolve_idp(context, self.metadata_store)

        decision = decide(
            idp.tags, self.config.idp_tag_whitelist, self.config.idp_tag_blacklist
        )
        if decision == TagDecision.BYPASS:
            logger.debug(
                f"Skipping identifier generation for IdP with tags {sorted(idp.tags)}"
            )
            result = self._copy(context, idp)
        else:
            result = self._derive(context, idp)

        if result.is_success:
            log_audit_event(
                IDENTIFIER_GENERATED if decision == TagDecision.FULL else IDENTIFIER_COPIED,
                {
                    "status": "success",
                    "idp": idp.entity_id,
                    "attribute": result.source_attribute,
                    "decision": decision.value,
                    "duration": time.perf_counter() - start_time,
                },
            )
        return result

    def _derive(
        self, context: AuthenticationContext, idp: IdPDescriptor
    ) -> ProcessingResult:
        config = self.config

        authority = resolve_authority(
            context.authority_chain,
            config.authority_map,
            config.skip_authority_list,
            config.add_authority,
        )
        if config.add_authority and authority.raw is None:
            raise UnresolvedAuthorityError(
                "Could not generate user identifier: Unknown authenticating authority"
            )

        candidates = effective_candidates(
            config.candidates, config.authority_candidate_map, authority
        )
        resolved = resolve_candidate(context.attributes, candidates)
        if resolved is None:
            return self._no_identifier(context, idp, candidates, TagDecision.FULL)

        composed = compose(
            resolved.name,
            resolved.value,
            authority.preimage_authority,
            config.add_candidate,
        )
        identifier = build_identifier(composed, self._salt, config.scope)
        logger.info(
            f"Generated user ID: externalId={composed.external_form!r}, "
            f"internalId={identifier!r}"
        )

        self._write(context, identifier)
        return ProcessingResult(
            status=ProcessingStatus.SUCCESS,
            identifier=identifier,
            decision=TagDecision.FULL,
            source_attribute=resolved.name,
        )

    def _copy(
        self, context: AuthenticationContext, idp: IdPDescriptor
    ) -> ProcessingResult:
        copied = copy_identifier(context.attributes, self.config.cuid_candidates)
        if copied is None:
            return self._no_identifier(
                context, idp, self.config.cuid_candidates, TagDecision.BYPASS
            )

        self._write(context, copied.value)
        return ProcessingResult(
            status=ProcessingStatus.SUCCESS,
            identifier=copied.value,
            decision=TagDecision.BYPASS,
            source_attribute=copied.name,
        )

    def _write(self, context: AuthenticationContext, identifier: str) -> None:
        context.set_attribute(self.config.id_attribute, [identifier])
        context.set_internal_attribute(CUID_ATTRIBUTE, [identifier])
        if self.config.set_userid_attribute:
            context.set_user_id(identifier)

    def _no_identifier(
        self,
        context: AuthenticationContext,
        idp: IdPDescriptor,
        attempted: tuple[str, ...],
        decision: TagDecision,
    ) -> ProcessingResult:
        report = no_identifier_report(
            attributes_attempted=list(attempted),
            idp_display_name=idp.display_name(),
            idp_support_email=idp.support_email(),
            return_url=context.return_url,
            base_url=self.base_url,
        )
        logger.warning(
            f"No identifier for IdP {idp.entity_id}: none of {list(attempted)} "
            f"carries a usable value"
        )
        log_audit_event(
            NO_IDENTIFIER,
            {
                "status": "failure",
                "idp": idp.entity_id,
                "decision": decision.value,
                "attempted": ",".join(attempted),
            },
        )
        return ProcessingResult(
            status=ProcessingStatus.NO_IDENTIFIER,
            decision=decision,
            error=report,
        )
