"""
Rule - the uniform validator handle used by the registry and dispatcher.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping

from deployment.diagnostics import Diagnostic

Configuration = Mapping[str, Any]
CheckFunction = Callable[[Configuration], List[Diagnostic]]


@dataclass(frozen=True)
class Rule:
    """
    A named, pure check over a configuration.

    Attributes:
        name: Rule name used in logs (e.g. 'port', 'immich.machinelearning')
        field: Configuration field the rule inspects; internal failures of the
            rule are reported against this field
        check: Function returning zero or more diagnostics
    """
    name: str
    field: str
    check: CheckFunction

    def __call__(self, configuration: Configuration) -> List[Diagnostic]:
        return list(self.check(configuration))
