from __future__ import annotations

PLACEHOLDER = "%s"


def escape_ldap_filter_value(value: str) -> str:
    """RFC 4515 escaping for LDAP filter values."""
    out: list[str] = []
    for ch in value:
        if ch == "\\":
            out.append("\\5c")
        elif ch == "*":
            out.append("\\2a")
        elif ch == "(":
            out.append("\\28")
        elif ch == ")":
            out.append("\\29")
        elif ch == "\x00":
            out.append("\\00")
        else:
            out.append(ch)
    return "".join(out)


def split_alternatives(value: str | None) -> list[str]:
    """Split a pipe-delimited option ("host1|host2") into its alternatives.

    Always returns at least one element so that ``[0]`` is safe.
    """
    return (value or "").split("|")


def expand_auth_query(template: str, value: str) -> str:
    """Substitute ``value`` into every ``%s`` placeholder of ``template``.

    >>> expand_auth_query("(|(uid=%s)(mail=%s))", "jdoe")
    '(|(uid=jdoe)(mail=jdoe))'
    """
    return template.replace(PLACEHOLDER, value)


def equality_filter(attr: str, value: str) -> str:
    return f"({attr}={value})"


def compose_bind_dn(attr: str, value: str, base_dn: str, overlay_dn: str = "") -> str:
    """Build ``attr=value,base_dn[,overlay_dn]``."""
    dn = f"{attr}={value},{base_dn}"
    if overlay_dn:
        dn += f",{overlay_dn}"
    return dn
