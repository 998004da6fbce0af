"""IdP tag policy."""

from collections.abc import Set

from opaque_smartid.models.results import TagDecision


def decide(
    idp_tags: Set[str],
    whitelist: Set[str],
    blacklist: Set[str],
) -> TagDecision:
    """Decide whether an IdP gets a derived identifier.

    The blacklist is checked first, so an IdP tagged for both lists is
    bypassed.

    Args:
        idp_tags: Tags of the authenticating IdP
        whitelist: If non-empty, only IdPs carrying one of these tags get FULL
        blacklist: IdPs carrying one of these tags get BYPASS

    Returns:
        TagDecision.FULL or TagDecision.BYPASS

    Example:
        >>> decide({"test", "edu"}, whitelist={"edu"}, blacklist={"test"})
        <TagDecision.BYPASS: 'BYPASS'>
    """
    if blacklist and not blacklist.isdisjoint(idp_tags):
        return TagDecision.BYPASS

    if whitelist and whitelist.isdisjoint(idp_tags):
        return TagDecision.BYPASS

    return TagDecision.FULL
