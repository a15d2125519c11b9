import logging
from typing import Any, Callable, List, Optional

from .models import (
    ErrorKind,
    ShareError,
    ShareLevel,
    ShareResult,
    SwitchName,
    SwitchRef,
    TrafficShare,
    TrafficType,
    as_switch_ref,
    parse_share_level,
    parse_traffic_type,
)

logger = logging.getLogger(__name__)


def _failure(kind: ErrorKind, message: str, cause: Optional[BaseException] = None, **kwargs: Any) -> ShareResult:
    return ShareResult(error=ShareError(kind, message, cause), **kwargs)


def _bad_switch(switch: object) -> ShareError:
    return ShareError(
        ErrorKind.USAGE,
        f"Switch must be a switch name or a distributed switch object, got {type(switch).__name__}: {switch!r}",
    )


def validate_share_request(
    switch: object,
    traffic_type: object,
    share_level: object,
    custom_shares: object = None,
) -> Optional[ShareError]:
    """Check every argument of set_traffic_share without touching vCenter. Returns None when valid."""
    if as_switch_ref(switch) is None:
        return _bad_switch(switch)
    if parse_traffic_type(traffic_type) is None:
        allowed = ", ".join(t.value for t in TrafficType)
        return ShareError(ErrorKind.USAGE, f"Unsupported traffic type {traffic_type!r} (expected one of: {allowed})")
    if parse_share_level(share_level) is None:
        allowed = ", ".join(level.value for level in ShareLevel)
        return ShareError(ErrorKind.USAGE, f"Unsupported share level {share_level!r} (expected one of: {allowed})")
    if custom_shares is not None:
        # bool is an int subclass; True/False are not share weights.
        if isinstance(custom_shares, bool) or not isinstance(custom_shares, int) or custom_shares < 0:
            return ShareError(ErrorKind.USAGE, f"Custom shares must be a non-negative integer, got {custom_shares!r}")
    return None


def resolve_switch(client: Any, ref: SwitchRef) -> ShareResult:
    """
    Resolve a SwitchRef to exactly one live distributed switch.

    A SwitchHandle is re-confirmed by its name, so a handle and its name behave identically.
    """
    try:
        name = ref.name
        matches = client.find_switches(name)
    except Exception as exc:  # noqa: BLE001
        return _failure(ErrorKind.REMOTE, f"Failed to look up distributed switch: {exc}", exc)

    if not matches:
        return _failure(ErrorKind.NOT_FOUND, f"Distributed switch {name!r} not found or not provided")
    if len(matches) > 1:
        return _failure(
            ErrorKind.NOT_FOUND,
            f"Distributed switch name {name!r} matches {len(matches)} switches; expected exactly one",
        )
    return ShareResult(switch=matches[0])


def describe_change(
    switch_name: str,
    traffic_type: TrafficType,
    share_level: ShareLevel,
    custom_shares: Optional[int] = None,
) -> str:
    share = share_level.value
    if share_level is ShareLevel.CUSTOM and custom_shares is not None:
        share = f"{share} ({custom_shares})"
    return f"modify traffic '{traffic_type.value}' with share '{share}' on switch '{switch_name}'"


def _find_entry(entries: List[Any], traffic_type: TrafficType) -> Optional[Any]:
    for entry in entries:
        if entry.key == traffic_type.value:
            return entry
    return None


def set_traffic_share(
    client: Any,
    switch: object,
    traffic_type: object,
    share_level: object,
    custom_shares: Optional[int] = None,
    *,
    dry_run: bool = False,
    confirm: Optional[Callable[[str], bool]] = None,
    yes: bool = False,
) -> ShareResult:
    """
    Set the NIOC share level of one infrastructure traffic type on a distributed switch.

    The reconfigure call runs only when the change is confirmed: `yes=True`, or `confirm`
    returns True for the change description. With `dry_run=True`, or without confirmation,
    the switch is returned unmodified and `applied` is False.

    `custom_shares` is used only with the 'custom' level; for other levels it is ignored.
    On success the switch is re-resolved so the result reflects vCenter's stored state.
    """
    invalid = validate_share_request(switch, traffic_type, share_level, custom_shares)
    if invalid is not None:
        return ShareResult(error=invalid)

    ref = as_switch_ref(switch)
    ttype = parse_traffic_type(traffic_type)
    level = parse_share_level(share_level)

    logger.info("Resolving distributed switch %s", ref)
    resolved = resolve_switch(client, ref)
    if not resolved.ok:
        return resolved
    dvs = resolved.switch

    try:
        switch_name = dvs.name
        config = dvs.config
        config_version = config.configVersion
        entries = list(config.infrastructureTrafficResourceConfig or [])
    except Exception as exc:  # noqa: BLE001
        return _failure(ErrorKind.REMOTE, f"Failed to read configuration of switch: {exc}", exc)

    description = describe_change(switch_name, ttype, level, custom_shares)

    entry = _find_entry(entries, ttype)
    if entry is None:
        return _failure(
            ErrorKind.INTERNAL,
            f"Switch {switch_name!r} has no traffic resource entry for {ttype.value!r}",
            description=description,
        )
    allocation = entry.allocationInfo
    if allocation is None or allocation.shares is None:
        return _failure(
            ErrorKind.INTERNAL,
            f"Traffic resource {ttype.value!r} on switch {switch_name!r} has no share allocation",
            description=description,
        )

    if dry_run:
        logger.info("What if: %s", description)
        return ShareResult(switch=dvs, applied=False, description=description)

    if not yes and (confirm is None or not confirm(description)):
        logger.info("Change not confirmed, skipping: %s", description)
        return ShareResult(switch=dvs, applied=False, description=description)

    allocation.shares.level = level.value
    if level is ShareLevel.CUSTOM and custom_shares is not None:
        allocation.shares.shares = custom_shares

    logger.warning("Applying NIOC change: %s (configVersion=%s)", description, config_version)
    try:
        client.reconfigure_traffic_resources(dvs, config_version, entries)
    except Exception as exc:  # noqa: BLE001
        return _failure(
            ErrorKind.REMOTE,
            f"Reconfiguration of switch {switch_name!r} failed: {exc}",
            exc,
            description=description,
        )

    refreshed = resolve_switch(client, SwitchName(switch_name))
    if not refreshed.ok:
        refreshed.applied = True
        refreshed.description = description
        return refreshed

    logger.info("Switch %s reconfigured", switch_name)
    return ShareResult(switch=refreshed.switch, applied=True, description=description)


def _to_traffic_share(entry: Any) -> TrafficShare:
    allocation = entry.allocationInfo
    shares = getattr(allocation, "shares", None)
    return TrafficShare(
        key=entry.key,
        level=str(shares.level) if shares is not None and shares.level is not None else None,
        shares=shares.shares if shares is not None else None,
        limit=getattr(allocation, "limit", None),
        reservation=getattr(allocation, "reservation", None),
    )


def get_traffic_shares(client: Any, switch: object) -> ShareResult:
    """Read the current NIOC traffic resource allocations of a distributed switch."""
    ref = as_switch_ref(switch)
    if ref is None:
        return ShareResult(error=_bad_switch(switch))

    resolved = resolve_switch(client, ref)
    if not resolved.ok:
        return resolved

    try:
        entries = list(resolved.switch.config.infrastructureTrafficResourceConfig or [])
    except Exception as exc:  # noqa: BLE001
        return _failure(ErrorKind.REMOTE, f"Failed to read configuration of switch: {exc}", exc)

    resolved.shares = [_to_traffic_share(e) for e in entries]
    return resolved
