"""Opaque identifier filter examples.

This module demonstrates how a hosting framework uses the filters: deriving
an identifier, binding it to the authenticating authority, bypassing
derivation for tagged IdPs, and handling the NO_IDENTIFIER report.

Run with a salt in the environment:

    SMARTID_SECRET_SALT=$(openssl rand -hex 32) python examples/smartid_filter_example.py
"""

import logging

from opaque_smartid.config import build_identifier_config, load_config, load_secret_salt
from opaque_smartid.identifier.filter import OpaqueSmartIDFilter
from opaque_smartid.models.context import AuthenticationContext
from opaque_smartid.models.results import build_error_redirect
from opaque_smartid.utils.exceptions import SmartIDError, create_error_info

# Configure logging to see the diagnostic externalId lines
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

IDP = "https://idp.example.org"


def context_for(attributes, authority_chain=(IDP,), tags=()):
    return AuthenticationContext.from_dict(
        {
            "attributes": attributes,
            "authority_chain": list(authority_chain),
            "source": {
                "entity_id": authority_chain[-1] if authority_chain else IDP,
                "tags": list(tags),
                "UIInfo": {"DisplayName": {"en": "Example University"}},
                "contacts": [{"contactType": "support", "emailAddress": "mailto:help@example.org"}],
            },
            "return_url": "https://sp.example.org/login",
        }
    )


def example_1_derive_identifier(salt):
    """Example 1: Derive a scoped identifier from eduPersonPrincipalName."""
    print("=" * 80)
    print("EXAMPLE 1: Deriving an identifier")
    print("=" * 80)

    smart_id = OpaqueSmartIDFilter(build_identifier_config({"scope": "example.org"}), salt)
    context = context_for({"eduPersonPrincipalName": ["alice@example.org"]})

    result = smart_id.process(context)
    print(f"  Source attribute: {result.source_attribute}")
    print(f"  smart_id:         {context.attributes['smart_id'][0]}")
    print(f"  user_id:          {context.user_id}")
    print()


def example_2_authority_remap(salt):
    """Example 2: An IdP changing its entity ID keeps identifiers stable."""
    print("=" * 80)
    print("EXAMPLE 2: Authority remapping")
    print("=" * 80)

    smart_id = OpaqueSmartIDFilter(
        build_identifier_config({"authority_map": {"https://old.example.org": IDP}}), salt
    )
    attributes = {"eduPersonPrincipalName": ["alice@example.org"]}

    old = smart_id.process(context_for(attributes, ("https://old.example.org",)))
    new = smart_id.process(context_for(attributes, (IDP,)))
    print(f"  Same identifier: {old.identifier == new.identifier}")
    print()


def example_3_tag_bypass(salt):
    """Example 3: Trusted IdPs keep their own identifier."""
    print("=" * 80)
    print("EXAMPLE 3: Tag bypass")
    print("=" * 80)

    smart_id = OpaqueSmartIDFilter(
        build_identifier_config({"idp_tag_blacklist": ["exclude_smartid"]}), salt
    )
    context = context_for({"subject-id": ["alice@example.org"]}, tags=("exclude_smartid",))

    result = smart_id.process(context)
    print(f"  Decision:   {result.decision.value}")
    print(f"  Identifier: {result.identifier}")
    print()


def example_4_no_identifier(salt, config):
    """Example 4: Render the NO_IDENTIFIER report as an error page redirect."""
    print("=" * 80)
    print("EXAMPLE 4: NO_IDENTIFIER report")
    print("=" * 80)

    smart_id = OpaqueSmartIDFilter(config.identifier, salt)
    result = smart_id.process(context_for({"mail": ["alice@example.org"]}))

    report = result.error
    print(f"  Attempted: {', '.join(report.parameters['attributesAttempted'])}")
    print(f"  Contact:   {report.parameters['idpSupportEmail']}")
    print(
        "  Redirect:  "
        + build_error_redirect(report, config.error_report.base_url, config.error_report.error_path)
    )
    print()


def example_5_unresolved_authority(salt):
    """Example 5: A login without authenticating authority is aborted."""
    print("=" * 80)
    print("EXAMPLE 5: Unresolved authority")
    print("=" * 80)

    smart_id = OpaqueSmartIDFilter(build_identifier_config({}), salt)
    try:
        smart_id.process(context_for({"eduPersonPrincipalName": ["alice@example.org"]}, ()))
    except SmartIDError as e:
        error_info = create_error_info(e)
        print(f"  {error_info.error_type} ({error_info.category.value}): {e}")
        print(f"  Fix: {error_info.remediation}")
    print()


if __name__ == "__main__":
    config = load_config()
    salt = load_secret_salt(config)

    example_1_derive_identifier(salt)
    example_2_authority_remap(salt)
    example_3_tag_bypass(salt)
    example_4_no_identifier(salt, config)
    example_5_unresolved_authority(salt)
