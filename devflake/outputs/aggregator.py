"""Output aggregation.

Collects per-platform shells into a single structure addressed by platform,
output kind and name, e.g. ``devShells.x86_64-linux.default``.
"""

from typing import Dict, List, Mapping

from devflake.core.exceptions import OutputNotFoundError
from devflake.shell.projector import EnvironmentSpec

DEV_SHELLS = "devShells"


class FlakeOutputs:
    """
    Evaluated outputs of a descriptor.

    Attributes:
        outputs: platform -> kind -> name -> EnvironmentSpec
    """

    def __init__(self, outputs: Mapping[str, Mapping[str, Mapping[str, EnvironmentSpec]]]):
        self.outputs = {
            system: {kind: dict(named) for kind, named in kinds.items()}
            for system, kinds in outputs.items()
        }

    def get(
        self, platform, name: str = "default", kind: str = DEV_SHELLS
    ) -> EnvironmentSpec:
        """
        Look up one output.

        Raises:
            OutputNotFoundError: If the platform, kind or name is unknown
        """
        system = str(platform)
        try:
            return self.outputs[system][kind][name]
        except KeyError:
            raise OutputNotFoundError(system, kind, name) from None

    def systems(self) -> List[str]:
        return list(self.outputs)

    def names(self, platform, kind: str = DEV_SHELLS) -> List[str]:
        return list(self.outputs.get(str(platform), {}).get(kind, {}))

    def to_dict(self) -> dict:
        """``{kind: {system: {name: spec}}}`` with sorted keys."""
        data: Dict[str, Dict[str, Dict[str, dict]]] = {}
        for system in sorted(self.outputs):
            for kind, named in self.outputs[system].items():
                data.setdefault(kind, {})[system] = {
                    name: named[name].to_dict() for name in sorted(named)
                }
        return {kind: data[kind] for kind in sorted(data)}

    def __len__(self) -> int:
        return len(self.outputs)

    def __contains__(self, platform) -> bool:
        return str(platform) in self.outputs


def aggregate(
    per_platform: Mapping[str, Mapping[str, EnvironmentSpec]],
    kind: str = DEV_SHELLS,
) -> FlakeOutputs:
    """Assemble ``{platform: {name: spec}}`` into FlakeOutputs."""
    return FlakeOutputs(
        {system: {kind: shells} for system, shells in per_platform.items()}
    )


__all__ = ["DEV_SHELLS", "FlakeOutputs", "aggregate"]
