"""Protocol compatibility policy implied by xtables matches and targets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .expr.base import Expression
from .expr.xtables import Match, Target

NFT_RULE_COMPAT_F_INV = 1 << 1
NFT_RULE_COMPAT_F_MASK = NFT_RULE_COMPAT_F_INV

IPPROTO_TCP = 6
IPPROTO_UDP = 17
IPPROTO_ESP = 50
IPPROTO_COMP = 108
IPPROTO_SCTP = 132
IPPROTO_UDPLITE = 136


@dataclass(frozen=True)
class CompatPolicy:
    """The layer-4 protocol (and flags) an xtables extension requires."""

    proto: int
    flag: int = 0


class CompatPolicyConflict(ValueError):
    """Raised when two extensions in a rule require different policies."""


XT_MATCH_COMPAT: Mapping[str, CompatPolicy] = {
    "tcp": CompatPolicy(IPPROTO_TCP),
    "udp": CompatPolicy(IPPROTO_UDP),
    "udplite": CompatPolicy(IPPROTO_UDPLITE),
    "tcpmss": CompatPolicy(IPPROTO_TCP),
    "sctp": CompatPolicy(IPPROTO_SCTP),
    "osf": CompatPolicy(IPPROTO_TCP),
    "ipcomp": CompatPolicy(IPPROTO_COMP),
    "esp": CompatPolicy(IPPROTO_ESP),
}

XT_TARGET_COMPAT: Mapping[str, CompatPolicy] = {
    "TCPOPTSTRIP": CompatPolicy(IPPROTO_TCP),
    "TCPMSS": CompatPolicy(IPPROTO_TCP),
}


def _policy_of(expr: Expression) -> CompatPolicy | None:
    if isinstance(expr, Match):
        return XT_MATCH_COMPAT.get(expr.name)
    if isinstance(expr, Target):
        return XT_TARGET_COMPAT.get(expr.name)
    return None


def get_compat_policy(exprs: Iterable[Expression]) -> CompatPolicy | None:
    """Return the single compat policy the expressions require, if any.

    Raises CompatPolicyConflict if two extensions require different ones.
    """
    found: CompatPolicy | None = None
    source: Expression | None = None
    for expr in exprs:
        policy = _policy_of(expr)
        if policy is None:
            continue
        if found is None:
            found, source = policy, expr
        elif policy != found:
            raise CompatPolicyConflict(
                f"{source!r} and {expr!r} have conflicting compat policies "
                f"{found!r} vs {policy!r}"
            )
    return found