"""
Macro expansion for build-variable placeholders.

Supports ``${VAR}`` and ``$VAR`` forms. Names in the braced form may also
contain dots (``${build.id}``). Variables missing from the map are left in
the text exactly as written, so a typo stays visible in the build log
instead of collapsing to an empty string.

Example:
    >>> replace_macro("logs-${BUILD_ID}", {"BUILD_ID": "42"})
    'logs-42'
    >>> replace_macro("$OUT_DIR/*.log", {})
    '$OUT_DIR/*.log'
"""

import re
from typing import Mapping, Optional

_MACRO = re.compile(r"\$(?:\{([A-Za-z0-9_.]+)\}|([A-Za-z0-9_]+))")


def replace_macro(template: Optional[str], env: Mapping[str, str]) -> Optional[str]:
    """
    Replace ``${VAR}`` / ``$VAR`` placeholders in ``template`` using ``env``.

    Args:
        template: Text to expand (None is passed through)
        env: Variable map, usually the build's environment

    Returns:
        Expanded text, or None if ``template`` was None
    """
    if template is None:
        return None

    def _substitute(match: "re.Match[str]") -> str:
        name = match.group(1) or match.group(2)
        value = env.get(name)
        return match.group(0) if value is None else value

    return _MACRO.sub(_substitute, template)


__all__ = ["replace_macro"]
